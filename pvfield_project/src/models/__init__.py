"""Domain models for PVField.

Models are pydantic records validated once when they enter the application
(store load, catalog import); the geometry code trusts them afterwards.
"""

from .field_segment import FieldSegment, Orientation, RackingType
from .layout import DesignSummary, LayoutParameters, LayoutResult
from .map_scale import MapScale
from .module import Module

__all__ = [
    "DesignSummary",
    "FieldSegment",
    "LayoutParameters",
    "LayoutResult",
    "MapScale",
    "Module",
    "Orientation",
    "RackingType",
]
