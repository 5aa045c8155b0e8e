"""Main code base of the PVField layout engine."""
