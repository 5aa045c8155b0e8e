"""Planar geometry helpers: projection, polygon metrics and setback insets."""
