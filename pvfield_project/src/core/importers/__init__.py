"""Importers that turn vendor files into PVField models."""
