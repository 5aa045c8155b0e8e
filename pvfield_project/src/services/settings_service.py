from __future__ import annotations

"""settings_service.py
Provides application‑wide persisted settings using a JSON file in the user's
home directory (``~/.pvfield/settings.json``).  Access via the *singleton*
:class:`SettingsService`.

Example
-------
>>> settings = SettingsService()
>>> settings.get("default_row_spacing_ft")
10.0
>>> settings.set("default_setback_ft", 4.0)
>>> settings.save()
"""

import json
import logging
from pathlib import Path
from typing import Any

from ..models.map_scale import MapScale
from ..utils.singleton import Singleton

__all__ = ["SettingsService"]

logger = logging.getLogger(__name__)


class SettingsService(Singleton):
    """Load/save user settings to *~/.pvfield/settings.json* (singleton)."""

    _path: Path = Path.home() / ".pvfield" / "settings.json"

    _defaults: dict[str, Any] = {
        # Layout parameters given to newly drawn field segments
        "default_orientation": "portrait",
        "default_row_spacing_ft": 10.0,
        "default_module_spacing_ft": 0.5,
        "default_setback_ft": 4.0,
        "default_tilt_deg": 20.0,
        "default_racking_type": "fixed_tilt",
        "default_frame_size_up": 2,
        "default_frame_size_wide": 1,
        # Projected units per metre (1.0 = work in metres)
        "units_per_meter": 1.0,
        # Where SegmentStore / ModuleCatalog keep their JSON files
        "store_dir": str(Path.home() / ".pvfield" / "projects"),
        "catalog_path": str(Path.home() / ".pvfield" / "modules.json"),
    }

    # ------------------------------------------------------------------
    def __init__(self) -> None:  # noqa: D401
        # Guard – only run once due to Singleton inheritance
        if getattr(self, "_initialized", False):  # type: ignore[attr-defined]
            return

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover – path issues
            logger.warning("Cannot create settings directory %s: %s", self._path.parent, exc)

        # Merge defaults with loaded file
        self._data: dict[str, Any] = {**self._defaults, **self._load()}
        self._initialized = True  # type: ignore[attr-defined]

    # ------------------------------------------------------------------
    def _load(self) -> dict[str, Any]:
        """Read JSON file if it exists; return dict or empty on failure."""
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fp:
                data = json.load(fp)
            # Only keep keys we recognise – ignore unknowns
            return {k: data[k] for k in self._defaults.keys() if k in data}
        except (OSError, json.JSONDecodeError) as exc:  # pragma: no cover – corrupt file etc.
            logger.error("Failed to load settings file %s: %s", self._path, exc)
            return {}

    # ------------------------------------------------------------------
    def get(self, key: str, default: Any | None = None) -> Any | None:  # noqa: D401 – simple accessor
        """Return setting *key* or *default* if missing."""
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:  # noqa: D401 – simple mutator
        """Update setting value in memory. Call :pymeth:`save` to persist."""
        self._data[key] = value

    def save(self) -> None:  # noqa: D401 – straightforward persist
        """Write current settings to JSON file, creating directories as needed."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as fp:
                json.dump(self._data, fp, indent=2)
            logger.info("Settings saved to %s", self._path)
        except OSError as exc:  # pragma: no cover – disk full etc.
            logger.error("Failed to save settings to %s: %s", self._path, exc)

    # ------------------------------------------------------------------
    # Layout defaults
    # ------------------------------------------------------------------
    def layout_defaults(self) -> dict[str, Any]:
        """Return the layout fields a new :class:`FieldSegment` starts with."""
        return {
            "orientation": str(self.get("default_orientation", self._defaults["default_orientation"])),
            "row_spacing": float(self.get("default_row_spacing_ft", self._defaults["default_row_spacing_ft"])),
            "module_spacing": float(
                self.get("default_module_spacing_ft", self._defaults["default_module_spacing_ft"]),
            ),
            "setback": float(self.get("default_setback_ft", self._defaults["default_setback_ft"])),
            "tilt": float(self.get("default_tilt_deg", self._defaults["default_tilt_deg"])),
            "racking_type": str(self.get("default_racking_type", self._defaults["default_racking_type"])),
            "frame_size_up": int(self.get("default_frame_size_up", self._defaults["default_frame_size_up"])),
            "frame_size_wide": int(self.get("default_frame_size_wide", self._defaults["default_frame_size_wide"])),
        }

    def set_setback_default(self, value: float) -> None:
        """Set the default setback in feet."""
        self.set("default_setback_ft", float(value))
        self.save()

    def set_row_spacing_default(self, value: float) -> None:
        """Set the default row spacing in feet."""
        self.set("default_row_spacing_ft", float(value))
        self.save()

    # ------------------------------------------------------------------
    # Map scale / storage locations
    # ------------------------------------------------------------------
    def map_scale(self) -> MapScale:
        units = float(self.get("units_per_meter", self._defaults["units_per_meter"]))
        return MapScale.metric() if units == 1.0 else MapScale.from_map_view(units)

    def store_dir(self) -> Path:
        return Path(str(self.get("store_dir", self._defaults["store_dir"])))

    def catalog_path(self) -> Path:
        return Path(str(self.get("catalog_path", self._defaults["catalog_path"])))
