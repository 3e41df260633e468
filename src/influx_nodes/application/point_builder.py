from typing import Any, Mapping, Optional

from ..domain.errors import InvalidPayload
from ..domain.models import DataPoint
from ..resources.strings import ErrorStrings
from .field_classifier import classify, to_text

# Field key redirected to the point timestamp
TIME_KEY = "time"


class PointBuilder:
    """
    Builds DataPoint records from field and tag mappings.
    The measurement is assumed valid; callers resolve and check it.
    """
    def __init__(self, strict: bool = False):
        self._strict = strict

    def build(
        self,
        measurement: str,
        fields: Mapping[str, Any],
        tags: Optional[Mapping[str, Any]] = None,
        time_key: Optional[str] = TIME_KEY,
    ) -> DataPoint:
        if not isinstance(fields, Mapping):
            raise InvalidPayload(ErrorStrings.ERR_FIELDS_NOT_OBJECT.format(type(fields).__name__))
        if tags is not None and not isinstance(tags, Mapping):
            raise InvalidPayload(ErrorStrings.ERR_TAGS_NOT_OBJECT.format(type(tags).__name__))

        point = DataPoint(measurement=measurement)
        for key, value in fields.items():
            name = str(key)
            if time_key is not None and name == time_key:
                point.timestamp = value
            else:
                point.fields[name] = classify(value, name=name, strict=self._strict)

        for key, value in (tags or {}).items():
            point.tags[str(key)] = to_text(value)

        return point


def build(measurement: str, fields: Mapping[str, Any], tags: Optional[Mapping[str, Any]] = None) -> DataPoint:
    """Module-level shortcut using compatibility (non-strict) typing."""
    return PointBuilder().build(measurement, fields, tags)
