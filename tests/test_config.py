import math

import pytest

from range_rings.core.config import (
    ChangeKind,
    ConfigChange,
    ConfigStore,
    RingConfig,
    resolve_field,
)
from range_rings.core.geometry import ConfigValidationError
from range_rings.core.status import StatusBoard, StatusLevel


class ChangeRecorder:
    def __init__(self) -> None:
        self.changes: list[ConfigChange] = []

    def __call__(self, change: ConfigChange) -> None:
        self.changes.append(change)


def build_store(**overrides):
    status = StatusBoard()
    store = ConfigStore(RingConfig(**overrides), status=status)
    recorder = ChangeRecorder()
    store.subscribe(recorder)
    return store, status, recorder


def test_defaults_match_plugin_defaults() -> None:
    config = RingConfig()

    assert config.color == (200, 200, 200, 255)
    assert config.line_width == 0.02
    assert config.max_radius == 200.0
    assert config.spacing == 10.0
    assert config.resolution == 99
    assert config.show_labels is True
    assert config.label_size == 5.0
    assert config.reference_frame == "base_link"


@pytest.mark.parametrize(
    "name,value,kind",
    [
        ("color", "#FF0000", ChangeKind.STYLE),
        ("line_width", 0.5, ChangeKind.STYLE),
        ("label_size", 2.0, ChangeKind.STYLE),
        ("max_radius", 50.0, ChangeKind.GEOMETRY),
        ("spacing", 5.0, ChangeKind.GEOMETRY),
        ("resolution", 12, ChangeKind.GEOMETRY),
        ("reference_frame", "odom", ChangeKind.GEOMETRY),
        ("show_labels", False, ChangeKind.VISIBILITY),
    ],
)
def test_accepted_change_notifies_once_with_its_kind(name, value, kind) -> None:
    store, _status, recorder = build_store()

    result = store.set(name, value)

    assert result["status"] == "success"
    assert len(recorder.changes) == 1
    change = recorder.changes[0]
    assert change.accepted is True
    assert change.field == name
    assert change.kind is kind
    assert store.get(name) == result["value"]


@pytest.mark.parametrize(
    "name,value,code",
    [
        ("line_width", -0.1, "NEGATIVE_VALUE"),
        ("max_radius", -1.0, "NEGATIVE_VALUE"),
        ("spacing", -5, "NEGATIVE_VALUE"),
        ("label_size", -2.0, "NEGATIVE_VALUE"),
        ("spacing", math.nan, "NOT_FINITE"),
        ("spacing", "ten", "INVALID_TYPE"),
        ("resolution", 2, "INVALID_RESOLUTION"),
        ("resolution", 100, "RESOLUTION_EXCEEDED"),
        ("resolution", 4.5, "INVALID_TYPE"),
        ("show_labels", "yes", "INVALID_TYPE"),
        ("color", "not-a-color", "INVALID_COLOR"),
        ("reference_frame", "  ", "INVALID_FRAME"),
    ],
)
def test_rejection_keeps_prior_value(name, value, code) -> None:
    store, _status, recorder = build_store()
    before = store.get(name)

    result = store.set(name, value)

    assert result["status"] == "error"
    assert result["code"] == code
    assert store.get(name) == before
    assert len(recorder.changes) == 1
    assert recorder.changes[0].accepted is False
    assert recorder.changes[0].code == code


def test_resolution_bounds_are_inclusive() -> None:
    store, status, _recorder = build_store()

    assert store.set("resolution", 3)["status"] == "success"
    assert store.set("resolution", 99)["status"] == "success"
    assert status.get("Resolution") is None


def test_resolution_rejection_reports_error_until_corrected() -> None:
    store, status, _recorder = build_store()

    store.set("resolution", 100)
    assert status.get("Resolution").level is StatusLevel.ERROR

    store.set("resolution", 40)
    assert status.get("Resolution").level is StatusLevel.OK


def test_other_rejections_warn_under_configuration() -> None:
    store, status, _recorder = build_store()

    store.set("spacing", -1.0)
    assert status.get("Configuration").level is StatusLevel.WARN

    store.set("spacing", 2.0)
    assert status.get("Configuration").level is StatusLevel.OK


def test_unknown_field_is_rejected_without_notification() -> None:
    store, _status, recorder = build_store()

    result = store.set("opacity", 0.5)

    assert result["status"] == "error"
    assert result["code"] == "UNKNOWN_FIELD"
    assert recorder.changes == []


def test_display_labels_resolve_to_fields() -> None:
    assert resolve_field("Max Radius") == "max_radius"
    assert resolve_field("show text") == "show_labels"
    assert resolve_field("Reference Frame") == "reference_frame"
    with pytest.raises(ConfigValidationError):
        resolve_field("Nope")


def test_values_are_normalized() -> None:
    store, _status, _recorder = build_store()

    store.set("Spacing", 3)
    store.set("color", [1.0, 0.0, 0.0])
    store.set("resolution", 12.0)
    store.set("reference_frame", " odom ")

    config = store.config
    assert config.spacing == 3.0 and isinstance(config.spacing, float)
    assert config.color == (255, 0, 0, 255)
    assert config.resolution == 12 and isinstance(config.resolution, int)
    assert config.reference_frame == "odom"


def test_config_property_is_a_copy() -> None:
    store, _status, _recorder = build_store()

    snapshot = store.config
    snapshot.spacing = 123.0

    assert store.get("spacing") == 10.0


def test_update_applies_in_order_and_reports_each() -> None:
    store, _status, recorder = build_store()

    results = store.update({"spacing": 2.0, "resolution": 500, "max_radius": 8.0})

    assert [r["status"] for r in results] == ["success", "error", "success"]
    assert [c.field for c in recorder.changes] == ["spacing", "resolution", "max_radius"]


def test_unsubscribe_stops_notifications() -> None:
    store, _status, recorder = build_store()

    assert store.unsubscribe(recorder) is True
    store.set("spacing", 1.0)

    assert recorder.changes == []
    assert store.unsubscribe(recorder) is False



def test_to_dict_reflects_accepted_values() -> None:
    store, _status, _recorder = build_store()
    store.set("color", "#0000FF")
    store.set("resolution", 500)

    data = store.config.to_dict()

    assert data["color"] == [0, 0, 255, 255]
    assert data["resolution"] == 99
    assert set(data) == {"color", "line_width", "max_radius", "spacing", "resolution",
                         "show_labels", "label_size", "reference_frame"}
