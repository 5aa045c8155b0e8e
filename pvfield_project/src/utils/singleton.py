from __future__ import annotations

"""singleton.py
Utility module providing a trivial *Singleton* base‑class that can be inherited
by services requiring a single application‑wide instance.

Only one instance per class per Python process.  Subclasses **must** guard
their own ``__init__`` against re‑initialisation (see
:class:`~pvfield_project.src.services.settings_service.SettingsService`).
"""

from typing import Any


class Singleton:  # noqa: D101 – trivial helper
    _instance: Singleton | None = None

    def __new__(cls, *args: Any, **kwargs: Any):
        if cls.__dict__.get("_instance") is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the cached instance (tests point the service at temp paths)."""
        cls._instance = None
