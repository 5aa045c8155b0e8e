"""Shared fixtures for the PVField test suite."""
import os
import sys
from pathlib import Path

import pytest

# Qt tests run headless.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# ---------------------------------------------------------------------------
# Ensure the repository root is on sys.path so that `import pvfield_project` is
# always resolvable when tests are run from any working directory (e.g., CI).
# ---------------------------------------------------------------------------
_repo_root = Path(__file__).resolve().parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

from pvfield_project.src.core.geometry.projection import LocalProjection  # noqa: E402
from pvfield_project.src.models.module import Module  # noqa: E402
from pvfield_project.src.services.settings_service import SettingsService  # noqa: E402

ORIGIN = (40.0, -105.0)


def rect_points(width_m, height_m, origin=ORIGIN):
    """Geographic rectangle ``width_m`` east by ``height_m`` north of *origin*."""
    proj = LocalProjection(origin)
    planar = [(0.0, 0.0), (width_m, 0.0), (width_m, height_m), (0.0, height_m)]
    return tuple(proj.unproject(p) for p in planar)


@pytest.fixture
def rectangle():
    """100 ft x 50 ft field (30.48 m east, 15.24 m north)."""
    return rect_points(30.48, 15.24)


@pytest.fixture
def module():
    return Module(id="mod-1", model_name="AS-400M", manufacturer="Acme Solar",
                  max_power_pmp=400.0, width=1.0, height=1.7)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """SettingsService pointed at a throwaway file."""
    monkeypatch.setattr(SettingsService, "_path", tmp_path / "settings.json")
    SettingsService.reset_instance()
    svc = SettingsService()
    yield svc
    SettingsService.reset_instance()


@pytest.fixture
def make_rect():
    """Factory fixture exposing :func:`rect_points` to test modules."""
    return rect_points
