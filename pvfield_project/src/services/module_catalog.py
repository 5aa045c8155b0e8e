"""Module catalog backed by a JSON file.

The catalog is the shared, read-only source of :class:`Module` records that
field segments reference by id.  Layout code never reads the catalog
directly; callers take one :py:meth:`ModuleCatalog.snapshot` per batch of
recomputes so every segment sees the same module data.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..core.importers.file_parser import FileParserError
from ..core.importers.pan_parser import PanParser
from ..models.module import Module

__all__ = ["ModuleCatalog", "ModuleCatalogError"]

logger = logging.getLogger(__name__)


class ModuleCatalogError(Exception):
    """Raised when the catalog file cannot be read or written."""


class ModuleCatalog:
    """In-memory module list with optional JSON persistence."""

    def __init__(self, modules: Iterable[Module] = (), path: Optional[Path] = None) -> None:
        self._path = Path(path) if path else None
        self._modules: Dict[str, Module] = {m.id: m for m in modules}

    # ------------------------------------------------------------------
    @classmethod
    def load(cls, path: Path) -> "ModuleCatalog":
        """Read the catalog at *path*; a missing file gives an empty catalog."""
        path = Path(path)
        if not path.exists():
            logger.info("No module catalog at %s; starting empty", path)
            return cls(path=path)
        try:
            with path.open("r", encoding="utf-8") as fp:
                records = json.load(fp)
            modules = [Module.from_dict(rec) for rec in records.get("modules", [])]
        except (OSError, json.JSONDecodeError, ValidationError, AttributeError) as exc:
            logger.error("Failed to load module catalog %s: %s", path, exc, exc_info=True)
            raise ModuleCatalogError(f"Cannot load module catalog {path}: {exc}") from exc
        logger.info("Loaded %d module(s) from %s", len(modules), path)
        return cls(modules, path=path)

    def save(self, path: Optional[Path] = None) -> None:
        target = Path(path) if path else self._path
        if target is None:
            raise ModuleCatalogError("Module catalog has no file path")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("w", encoding="utf-8") as fp:
                json.dump({"modules": [m.to_dict() for m in self._modules.values()]}, fp, indent=2)
        except OSError as exc:
            logger.error("Failed to save module catalog to %s: %s", target, exc)
            raise ModuleCatalogError(f"Cannot save module catalog {target}: {exc}") from exc
        logger.info("Module catalog saved to %s", target)

    # ------------------------------------------------------------------
    def list(self) -> List[Module]:
        return list(self._modules.values())

    def get(self, module_id: Optional[str]) -> Optional[Module]:
        if not module_id:
            return None
        return self._modules.get(module_id)

    def snapshot(self) -> Dict[str, Module]:
        """Copy of the id -> module mapping for one recompute batch."""
        return dict(self._modules)

    def add(self, module: Module) -> Module:
        if module.id in self._modules:
            logger.info("Replacing module '%s' in catalog", module.id)
        self._modules[module.id] = module
        return module

    def remove(self, module_id: str) -> bool:
        return self._modules.pop(module_id, None) is not None

    def import_pan(self, file_path: str, module_id: Optional[str] = None) -> Module:
        """Parse a PVsyst PAN file and add the module it describes.

        Raises:
            FileParserError: If the file is not a usable PAN file.
        """
        parser = PanParser()
        try:
            module = parser.parse(file_path, {"module_id": module_id} if module_id else None)
        except FileParserError:
            logger.warning("PAN import failed: %s", parser.get_last_error())
            raise
        return self.add(module)

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules
