"""Small shared utilities (logging, singleton helper)."""
