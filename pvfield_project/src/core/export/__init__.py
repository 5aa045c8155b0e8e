"""Exporters for computed layouts."""
