from __future__ import annotations

"""PVField – segment edit commands

Undo/redo commands for edits to a field segment.  Every command captures the
segment value before and after the edit; *redo* and *undo* simply hand one of
the two values back to the owning :class:`SegmentController`, which performs
the full layout recompute.

:class:`MoveVertexCommand` is *mergeable*: successive moves of the **same**
vertex collapse into one entry on the :class:`PySide6.QtGui.QUndoStack`, so an
entire drag is one undo step.
"""

from typing import TYPE_CHECKING

from PySide6.QtGui import QUndoCommand

from ..models.field_segment import FieldSegment

if TYPE_CHECKING:  # pragma: no cover
    from .segment_controller import SegmentController

__all__ = [
    "SegmentEditCommand",
    "AppendVertexCommand",
    "MoveVertexCommand",
    "DeleteVertexCommand",
    "UpdateParametersCommand",
    "AssignModuleCommand",
]


class SegmentEditCommand(QUndoCommand):
    """Swap the controller's segment between a *before* and *after* value.

    Args:
        controller: The controller owning the segment.
        before: Segment value prior to the edit.
        after:  Segment value with the edit applied (layout not yet refreshed).
        text:   Label shown in the undo history.
    """

    def __init__(self, controller: "SegmentController", before: FieldSegment, after: FieldSegment, text: str):
        super().__init__(text)
        self._controller = controller
        self._before = before
        self._after = after

    # ------------------------------------------------------------------
    # QUndoCommand interface
    # ------------------------------------------------------------------
    def redo(self):  # noqa: D401
        self._controller._apply(self._after)

    def undo(self):  # noqa: D401
        self._controller._apply(self._before)


class AppendVertexCommand(SegmentEditCommand):
    def __init__(self, controller: "SegmentController", before: FieldSegment, after: FieldSegment):
        super().__init__(controller, before, after, "Add vertex")


class DeleteVertexCommand(SegmentEditCommand):
    def __init__(self, controller: "SegmentController", before: FieldSegment, after: FieldSegment):
        super().__init__(controller, before, after, "Delete vertex")


class UpdateParametersCommand(SegmentEditCommand):
    def __init__(self, controller: "SegmentController", before: FieldSegment, after: FieldSegment):
        super().__init__(controller, before, after, "Edit layout rules")


class AssignModuleCommand(SegmentEditCommand):
    def __init__(self, controller: "SegmentController", before: FieldSegment, after: FieldSegment):
        super().__init__(controller, before, after, "Assign module")


class MoveVertexCommand(SegmentEditCommand):
    """One vertex move; repeated moves of a vertex within one gesture merge into one undo step."""

    _CMD_ID: int = 0xA10C  # Arbitrary non-zero constant

    def __init__(
        self,
        controller: "SegmentController",
        index: int,
        before: FieldSegment,
        after: FieldSegment,
        gesture: int = 0,
    ):
        super().__init__(controller, before, after, "Move vertex")
        self._index = index
        self._gesture = gesture

    @property
    def index(self) -> int:
        return self._index

    # ------------------------------------------------------------------
    # Merge logic – successive moves of the **same vertex** in the
    # same gesture merge.
    # ------------------------------------------------------------------
    def mergeWith(self, other: "QUndoCommand") -> bool:  # noqa: D401,N802
        """Collapse consecutive moves of the *same* vertex into one step.

        Moves from different gestures (two separate drags) stay separate.  The newest command's *after* value replaces ours so the composite
        command spans the whole movement.
        """
        if (
            isinstance(other, MoveVertexCommand)
            and other._index == self._index
            and other._gesture == self._gesture
        ):
            self._after = other._after
            return True
        return False

    def id(self) -> int:  # noqa: D401,N802 – Qt uses camelCase
        """Return constant ID so QUndoStack groups these commands."""
        return self._CMD_ID
