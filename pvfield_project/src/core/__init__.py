"""Core algorithms: geometry, layout packing, importers and exporters.

Nothing in this package touches Qt or the file system except the importers
and exporters, which read and write plain files.
"""
