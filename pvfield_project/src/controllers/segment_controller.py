#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Segment Controller Module for PVField.

Owns the single mutable reference to the field segment being edited on the
map.  The map editor reports vertex and parameter edits here; each committed
edit becomes an undoable command, triggers one full layout recompute and is
announced through :pyattr:`SegmentController.segment_changed`.

Drag gestures only update a boundary preview while the pointer moves; the
layout is recomputed once, when the gesture ends.
"""

import logging
from typing import Any, Optional, Tuple

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QUndoStack
from pydantic import ValidationError

from ..core.geometry.metrics import azimuth_toward, centroid
from ..core.layout.aggregator import recompute
from ..models.field_segment import FieldSegment, GeoPoint
from ..models.map_scale import MapScale
from ..services.module_catalog import ModuleCatalog
from ..services.segment_store import SegmentStore
from .commands import (
    AppendVertexCommand,
    AssignModuleCommand,
    DeleteVertexCommand,
    MoveVertexCommand,
    UpdateParametersCommand,
)

logger = logging.getLogger(__name__)

__all__ = ["SegmentController", "SegmentEditError", "EDITABLE_FIELDS"]

# Fields the sidebar may change through update_parameters().
EDITABLE_FIELDS = frozenset(
    {
        "name",
        "orientation",
        "row_spacing",
        "module_spacing",
        "setback",
        "azimuth",
        "tilt",
        "racking_type",
        "frame_size_up",
        "frame_size_wide",
    },
)


class SegmentEditError(Exception):
    """Raised for edits that cannot be applied (bad index, unknown module, bad value)."""


class SegmentController(QObject):
    """
    Applies editor edits to one field segment and keeps its layout current.

    Signals:
        segment_changed (FieldSegment): Emitted after every recompute.
        boundary_preview (tuple): Emitted while a vertex is dragged, with the
            provisional boundary points; the layout is not recomputed.
        segment_saved (str): Emitted with the project id after a save.
    """

    segment_changed = Signal(object)
    boundary_preview = Signal(object)
    segment_saved = Signal(str)

    def __init__(
        self,
        segment: FieldSegment,
        catalog: ModuleCatalog,
        store: Optional[SegmentStore] = None,
        project_id: Optional[str] = None,
        scale: Optional[MapScale] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._catalog = catalog
        self._store = store
        self._project_id = project_id
        self._scale = scale
        self._undo_stack = QUndoStack(self)
        self._drag_index: Optional[int] = None
        self._drag_origin: Optional[FieldSegment] = None
        self._drag_points: Optional[Tuple[GeoPoint, ...]] = None
        # Moves only merge within one gesture; every drag gets a new number.
        self._gesture = 0
        self._segment = recompute(segment, self._catalog.get(segment.module_id), self._scale)

    # --------------------------------------------------------------------------
    # State
    # --------------------------------------------------------------------------
    @property
    def segment(self) -> FieldSegment:
        return self._segment

    @property
    def undo_stack(self) -> QUndoStack:
        return self._undo_stack

    @property
    def is_dragging(self) -> bool:
        return self._drag_index is not None

    def set_scale(self, scale: Optional[MapScale]) -> None:
        """Use a new map scale and refresh the layout."""
        self._scale = scale
        self._apply(self._segment)

    def refresh(self) -> FieldSegment:
        """Recompute against the current catalog contents (e.g. after a module edit)."""
        self._apply(self._segment)
        return self._segment

    def _apply(self, segment: FieldSegment) -> None:
        """Recompute *segment* and make it current. Called by the commands."""
        module = self._catalog.get(segment.module_id)
        self._segment = recompute(segment, module, self._scale)
        self.segment_changed.emit(self._segment)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._segment.points):
            raise SegmentEditError(
                f"Vertex index {index} out of range for {len(self._segment.points)} point(s)",
            )

    # --------------------------------------------------------------------------
    # Vertex edits
    # --------------------------------------------------------------------------
    def append_vertex(self, point: GeoPoint) -> None:
        before = self._segment
        after = before.evolve(points=before.points + (tuple(point),))
        self._undo_stack.push(AppendVertexCommand(self, before, after))

    def move_vertex(self, index: int, point: GeoPoint) -> None:
        self._check_index(index)
        before = self._segment
        points = list(before.points)
        if tuple(points[index]) == tuple(point):
            logger.debug("Ignoring no-op move of vertex %d", index)
            return
        points[index] = tuple(point)
        after = before.evolve(points=tuple(points))
        self._undo_stack.push(MoveVertexCommand(self, index, before, after, self._gesture))

    def delete_vertex(self, index: int) -> None:
        self._check_index(index)
        before = self._segment
        points = before.points[:index] + before.points[index + 1:]
        if len(points) < 3:
            logger.info("Segment %s drops below 3 vertices; layout will be empty", before.id)
        self._undo_stack.push(DeleteVertexCommand(self, before, before.evolve(points=points)))

    # --------------------------------------------------------------------------
    # Drag gesture
    # --------------------------------------------------------------------------
    def begin_drag(self, index: int) -> None:
        self._check_index(index)
        self._gesture += 1
        self._drag_index = index
        self._drag_origin = self._segment
        self._drag_points = self._segment.points

    def drag_to(self, index: int, point: GeoPoint) -> None:
        """Move the dragged vertex in the preview only; no recompute."""
        if self._drag_index is None:
            self.begin_drag(index)
        elif index != self._drag_index:
            raise SegmentEditError(f"Drag in progress on vertex {self._drag_index}, not {index}")
        points = list(self._drag_points)
        points[index] = tuple(point)
        self._drag_points = tuple(points)
        self.boundary_preview.emit(self._drag_points)

    def end_drag(self, index: int) -> FieldSegment:
        """Commit the drag as one command and recompute the layout once."""
        if self._drag_index is None:
            return self._segment
        if index != self._drag_index:
            raise SegmentEditError(f"Drag in progress on vertex {self._drag_index}, not {index}")
        origin, points = self._drag_origin, self._drag_points
        self._drag_index = self._drag_origin = self._drag_points = None
        if points == origin.points:
            logger.debug("Drag of vertex %d ended where it started", index)
            return self._segment
        self._undo_stack.push(MoveVertexCommand(self, index, origin, origin.evolve(points=points), self._gesture))
        self._gesture += 1
        return self._segment

    def cancel_drag(self) -> None:
        if self._drag_origin is not None:
            self.boundary_preview.emit(self._drag_origin.points)
        self._drag_index = self._drag_origin = self._drag_points = None

    # --------------------------------------------------------------------------
    # Parameter edits
    # --------------------------------------------------------------------------
    def update_parameters(self, **changes: Any) -> None:
        """Apply a partial update of layout fields (one undo step)."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise SegmentEditError(f"Fields not editable here: {', '.join(sorted(unknown))}")
        before = self._segment
        try:
            after = before.evolve(**changes)
        except ValidationError as exc:
            raise SegmentEditError(f"Invalid layout value: {exc}") from exc
        if after == before:
            return
        self._undo_stack.push(UpdateParametersCommand(self, before, after))

    def assign_module(self, module_id: Optional[str]) -> None:
        """Assign a catalog module (or clear the assignment with ``None``)."""
        if module_id is not None and module_id not in self._catalog:
            raise SegmentEditError(f"Unknown module id '{module_id}'")
        before = self._segment
        if before.module_id == module_id:
            return
        self._undo_stack.push(AssignModuleCommand(self, before, before.evolve(module_id=module_id)))

    def rotate_toward(self, target: GeoPoint) -> None:
        """Point the rows at *target*, as the map's rotation handle does."""
        if self._segment.is_degenerate:
            return
        center = centroid(self._segment.points, self._scale)
        self.update_parameters(azimuth=azimuth_toward(center, target))

    # --------------------------------------------------------------------------
    # Undo / persistence
    # --------------------------------------------------------------------------
    def undo(self) -> None:
        self._undo_stack.undo()

    def redo(self) -> None:
        self._undo_stack.redo()

    def save(self) -> None:
        """Persist the current segment through the store (insert or replace)."""
        if self._store is None or not self._project_id:
            raise SegmentEditError("Controller has no store/project to save to")
        self._store.upsert(self._project_id, self._segment)
        self._undo_stack.setClean()
        logger.info("Segment %s saved to project '%s'", self._segment.id, self._project_id)
        self.segment_saved.emit(self._project_id)
