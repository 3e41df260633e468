import pytest
from src.influx_nodes.application.point_builder import PointBuilder, build
from src.influx_nodes.domain.errors import InvalidPayload, UnsupportedFieldType
from src.influx_nodes.domain.models import Float, Integer, String


def test_build_classifies_fields_and_stringifies_tags():
    point = build("weather", {"temp": 21.5, "count": 3, "state": "ok"}, {"room": 12, "zone": "a"})

    assert point.measurement == "weather"
    assert point.fields == {"temp": Float(21.5), "count": Integer(3), "state": String("ok")}
    assert point.tags == {"room": "12", "zone": "a"}
    assert point.timestamp is None


def test_time_key_sets_timestamp_and_is_not_a_field():
    point = build("m", {"x": 1, "time": "2024-01-01T00:00:00Z", "y": 2})

    assert "time" not in point.fields
    assert point.timestamp == "2024-01-01T00:00:00Z"
    assert list(point.fields) == ["x", "y"]


def test_field_order_follows_input():
    point = build("m", {"c": 1, "a": 2, "b": 3})
    assert list(point.fields) == ["c", "a", "b"]


def test_later_key_wins():
    point = build("m", {1: 5, "1": 7}, {2: "first", "2": "second"})
    assert point.fields == {"1": Integer(7)}
    assert point.tags == {"2": "second"}


def test_missing_tags_are_tolerated():
    assert build("m", {"x": 1}, None).tags == {}


def test_non_mapping_fields_are_rejected():
    with pytest.raises(InvalidPayload):
        build("m", 5)
    with pytest.raises(InvalidPayload):
        build("m", {"x": 1}, "tag")


def test_strict_builder_propagates_type_errors():
    builder = PointBuilder(strict=True)
    with pytest.raises(UnsupportedFieldType):
        builder.build("m", {"x": None})


def test_time_key_can_be_disabled():
    point = PointBuilder().build("m", {"time": 5}, time_key=None)
    assert point.fields == {"time": Integer(5)}
    assert point.timestamp is None


def test_whole_float_tags_render_like_integers():
    point = build("m", {"x": 1.0}, {"t": 1.0, "u": 1})

    assert point.fields == {"x": Integer(1)}
    assert point.tags == {"t": "1", "u": "1"}
