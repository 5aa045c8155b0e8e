"""pvfield_project package

Solar field layout engine: field segments drawn on a map are projected to a
local plane, inset by their setback and packed with module footprints.

The code base lives under :pymod:`pvfield_project.src`::

    from pvfield_project.src.core.layout.aggregator import recompute
    from pvfield_project.src.models.field_segment import FieldSegment
"""
