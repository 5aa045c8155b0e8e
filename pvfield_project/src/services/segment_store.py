#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
JSON-backed storage for field segments.

One file per project (``<root>/<project_id>.json``).  Records are validated
through :class:`FieldSegment` exactly once, on load; everything downstream
works with validated values.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import ValidationError

from ..models.field_segment import FieldSegment
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)

FORMAT_VERSION = 1


class SegmentStoreError(Exception):
    """Raised when segments cannot be written to or removed from the store."""


class SegmentLoadError(SegmentStoreError):
    """Raised when a project's segment file exists but cannot be read."""


def _migrate_v0_to_v1(data) -> dict:
    """Older files held a bare list of segment records."""
    if isinstance(data, list):
        logger.info("Migrating segment file: wrapping bare record list.")
        return {"version": FORMAT_VERSION, "segments": data}
    return data


class SegmentStore:
    """Load and save the field segments of a project as JSON."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, project_id: str) -> Path:
        if not project_id or any(sep in project_id for sep in ("/", "\\")) or project_id in (".", ".."):
            raise SegmentStoreError(f"Invalid project id: {project_id!r}")
        return self._root / f"{project_id}.json"

    # ------------------------------------------------------------------
    def load(self, project_id: str) -> List[FieldSegment]:
        """Return the segments of *project_id*; an unknown project has none.

        Raises:
            SegmentLoadError: If the file is unreadable, not JSON, or holds
                records that fail validation.
        """
        path = self.path_for(project_id)
        if not path.exists():
            logger.debug(f"No segment file for project '{project_id}'")
            return []
        try:
            with path.open("r", encoding="utf-8") as fp:
                data = _migrate_v0_to_v1(json.load(fp))
            segments = [FieldSegment.from_dict(rec) for rec in data.get("segments", [])]
        except OSError as e:
            logger.error(f"Error reading segment file {path}: {e}", exc_info=True)
            raise SegmentLoadError(f"Cannot read segments for project '{project_id}': {e}") from e
        except json.JSONDecodeError as e:
            logger.error(f"Error decoding JSON from {path}: {e}", exc_info=True)
            raise SegmentLoadError(f"Invalid JSON in {path}: {e}") from e
        except (ValidationError, AttributeError, TypeError) as e:
            logger.error(f"Invalid segment record in {path}: {e}", exc_info=True)
            raise SegmentLoadError(f"Invalid segment record in {path}: {e}") from e

        logger.info(f"Loaded {len(segments)} segment(s) for project '{project_id}'")
        return segments

    def save(self, project_id: str, segments: Iterable[FieldSegment]) -> Path:
        """Replace the stored segments of *project_id* (last write wins)."""
        path = self.path_for(project_id)
        payload = {
            "version": FORMAT_VERSION,
            "project_id": project_id,
            "segments": [seg.to_dict() for seg in segments],
        }
        fd, tmp_name = tempfile.mkstemp(prefix=f".{project_id}.", suffix=".tmp", dir=self._root)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(payload, fp, indent=2)
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error(f"Error writing segment file {path}: {e}", exc_info=True)
            Path(tmp_name).unlink(missing_ok=True)
            raise SegmentStoreError(f"Cannot save segments for project '{project_id}': {e}") from e
        logger.info(f"Saved {len(payload['segments'])} segment(s) to {path}")
        return path

    def upsert(self, project_id: str, segment: FieldSegment) -> List[FieldSegment]:
        """Insert or replace one segment, keeping the others in order."""
        segments = self.load(project_id)
        for i, existing in enumerate(segments):
            if existing.id == segment.id:
                segments[i] = segment
                break
        else:
            segments.append(segment)
        self.save(project_id, segments)
        return segments

    def delete(self, project_id: str, segment_id: str) -> bool:
        """Remove one segment; returns False when it was not stored."""
        segments = self.load(project_id)
        remaining = [s for s in segments if s.id != segment_id]
        if len(remaining) == len(segments):
            logger.warning(f"Attempted to delete non-existent segment '{segment_id}'")
            return False
        self.save(project_id, remaining)
        return True

    def get(self, project_id: str, segment_id: str) -> Optional[FieldSegment]:
        return next((s for s in self.load(project_id) if s.id == segment_id), None)
