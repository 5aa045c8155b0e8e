"""MapScale unit conversions and Module helpers."""
import math

import pytest
from pydantic import ValidationError

from pvfield_project.src.models.map_scale import FEET_PER_METER, MapScale
from pvfield_project.src.models.module import Module


def test_metric_scale() -> None:
    scale = MapScale()
    assert scale.units_per_meter == 1.0
    assert math.isclose(scale.feet_to_units(FEET_PER_METER), 1.0)
    assert math.isclose(scale.units_to_feet(1.0), FEET_PER_METER)
    assert math.isclose(scale.sq_units_to_sq_feet(1.0), FEET_PER_METER ** 2)


def test_map_view_scale() -> None:
    scale = MapScale.from_map_view(20.0)
    assert scale.source == "map_view"
    assert math.isclose(scale.meters_to_units(2.0), 40.0)
    assert math.isclose(scale.units_per_foot, 20.0 / FEET_PER_METER)


def test_scale_roundtrip() -> None:
    scale = MapScale.from_map_view(20.0)
    assert MapScale.from_dict(scale.to_dict()) == scale
    # Files from the map editor use the px_per_m key
    assert MapScale.from_dict({"px_per_m": 5.0}).units_per_meter == 5.0


def test_scale_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        MapScale(units_per_meter=0.0)


def test_module_can_be_laid_out(module) -> None:
    assert module.can_be_laid_out
    assert module.label == "Acme Solar AS-400M"
    assert not Module(id="x", model_name="x", width=1.0, height=1.7).can_be_laid_out
    assert not Module(id="x", model_name="x", width=0.0, height=1.7, max_power_pmp=400.0).can_be_laid_out


def test_module_dict_skips_empty_fields(module) -> None:
    data = module.to_dict()
    assert "voc" not in data
    assert Module.from_dict(data) == module
