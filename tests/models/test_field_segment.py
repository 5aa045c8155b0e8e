"""FieldSegment value semantics and stored-record migration."""
import pytest
from pydantic import ValidationError

from pvfield_project.src.models.field_segment import FieldSegment
from pvfield_project.src.models.layout import LayoutParameters


def test_defaults():
    seg = FieldSegment()
    assert seg.name == "Field Segment"
    assert seg.points == ()
    assert seg.azimuth is None
    assert seg.orientation == "portrait"
    assert seg.racking_type == "fixed_tilt"
    assert seg.is_degenerate
    assert FieldSegment().id != seg.id


def test_segment_is_immutable():
    seg = FieldSegment()
    with pytest.raises(ValidationError):
        seg.name = "renamed"


def test_evolve_returns_validated_copy(rectangle):
    seg = FieldSegment(points=rectangle)
    moved = seg.evolve(azimuth=370.0, orientation="Landscape")
    assert moved.azimuth == pytest.approx(10.0)
    assert moved.orientation == "landscape"
    assert moved.id == seg.id
    assert seg.azimuth is None

    with pytest.raises(ValidationError):
        seg.evolve(orientation="diagonal")


def test_from_dict_migrates_legacy_keys():
    """Records written by the older web client use camelCase keys."""
    record = {
        "id": "seg-1",
        "description": "South lot",
        "points": [[40.0, -105.0], [40.0, -104.999], [40.001, -104.999]],
        "moduleId": "mod-7",
        "rowSpacing": 12,
        "moduleSpacing": 0.25,
        "moduleTilt": 25,
        "rackingType": "Fixed Tilt",
        "frameSizeUp": 2,
        "orientation": "Portrait",
        "moduleCount": 0,
        "unknownKey": "ignored",
    }
    seg = FieldSegment.from_dict(record)
    assert seg.name == "South lot"
    assert seg.module_id == "mod-7"
    assert seg.row_spacing == 12.0
    assert seg.module_spacing == 0.25
    assert seg.tilt == 25.0
    assert seg.racking_type == "fixed_tilt"
    assert seg.frame_size_up == 2
    assert seg.points[1] == (40.0, -104.999)


def test_current_keys_win_over_legacy():
    seg = FieldSegment.from_dict({"name": "Kept", "description": "Old", "module_id": "a", "moduleId": "b"})
    assert seg.name == "Kept"
    assert seg.module_id == "a"


def test_to_dict_round_trip(rectangle):
    seg = FieldSegment(points=rectangle, module_id="mod-1", setback=4.0, azimuth=12.5)
    assert FieldSegment.from_dict(seg.to_dict()) == seg


def test_layout_parameters_from_segment():
    seg = FieldSegment(orientation="landscape", row_spacing=10.0, module_spacing=0.5, setback=4.0, azimuth=90.0)
    params = LayoutParameters.from_segment(seg)
    assert params == LayoutParameters("landscape", 10.0, 0.5, 4.0, 90.0)


def test_from_dict_flattens_layout_rules():
    """The web client's nested layoutRules object feeds the layout fields."""
    record = {
        "id": "seg-2",
        "points": [[40.0, -105.0], [40.0, -104.999], [40.001, -104.999]],
        "selectedModuleId": "mod-7",
        "layoutRules": {
            "orientation": "landscape",
            "rowSpacing": 12,
            "moduleSpacing": 0.5,
            "setback": 4,
            "azimuth": 200,
            "tilt": 25,
        },
    }
    seg = FieldSegment.from_dict(record)
    assert seg.orientation == "landscape"
    assert seg.row_spacing == 12.0
    assert seg.module_spacing == 0.5
    assert seg.setback == 4.0
    assert seg.azimuth == 200.0
    assert seg.tilt == 25.0
    assert seg.module_id == "mod-7"


def test_top_level_fields_win_over_layout_rules():
    seg = FieldSegment.from_dict({"row_spacing": 8.0, "layoutRules": {"rowSpacing": 12, "setback": 3}})
    assert seg.row_spacing == 8.0
    assert seg.setback == 3.0
