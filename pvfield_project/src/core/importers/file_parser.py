#!/usr/bin/env python3
"""File parser interface for PVField importers.

Importers read a vendor file and hand back a validated model.  They keep the
last error message around so the upload dialog can show it without parsing
exception text.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional


class FileParserError(Exception):
    """Exception raised for errors during file parsing."""


class FileParser(ABC):
    """Abstract base class for file parsers."""

    def __init__(self):
        """Initialize the file parser."""
        self.logger = logging.getLogger(__name__)
        self._file_path: Optional[str] = None
        self._data: Dict[str, Any] = {}
        self._last_error: Optional[str] = None

    @abstractmethod
    def parse(self, file_path: str, options: Optional[Dict] = None) -> Any:
        """Parse the given file and return the importer's model.

        Raises:
            FileParserError: If the file cannot be read or holds no usable data.

        """

    @abstractmethod
    def validate(self) -> bool:
        """Return True if the last parsed data is usable."""

    @property
    def data(self) -> Dict[str, Any]:
        """Raw key/value data from the last parse."""
        return dict(self._data)

    def read_text(self, file_path: str) -> str:
        """Read a text file, tolerating the Windows code pages vendors ship."""
        path = Path(file_path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            self.log_error(f"Cannot read {file_path}", exc)
            raise FileParserError(self._last_error) from exc
        for encoding in ("utf-8-sig", "cp1252", "latin-1"):
            try:
                return raw.decode(encoding)
            except UnicodeDecodeError:
                continue
        return raw.decode("latin-1", errors="replace")  # pragma: no cover - latin-1 never fails

    def log_error(self, message: str, exception: Optional[Exception] = None) -> None:
        """Log an error message and remember it as the last error."""
        error_msg = message
        if exception:
            error_msg = f"{message}: {exception!s}"
        self.logger.error(error_msg)
        self._last_error = error_msg

    def get_last_error(self) -> Optional[str]:
        return self._last_error

    @classmethod
    def get_supported_extensions(cls) -> List[str]:
        """File extensions (e.g. ``['.pan']``) handled by this parser."""
        return []
