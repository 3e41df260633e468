import json
import math
import re
from typing import Any, Mapping

from ..domain.errors import InvalidFieldValue, UnsupportedFieldType
from ..domain.models import Boolean, Float, Integer, String, TypedValue
from ..resources.strings import ErrorStrings

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Line protocol integer literal, e.g. "42i" or "-7i"
_INT_LITERAL = re.compile(r"-?\d+i", re.ASCII)


def to_text(value: Any) -> str:
    """
    Textual form used for stringified fields and for tag values.
    None renders as "null", containers as compact JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None or isinstance(value, (Mapping, list, tuple)):
        try:
            return json.dumps(value, separators=(",", ":"), default=str)
        except ValueError:
            # circular containers
            return str(value)
    if isinstance(value, float) and value.is_integer():
        # 1.0 renders as "1", matching how whole numbers are classified
        return str(int(value))
    return str(value)


def _integer(name: str, value: int) -> Integer:
    if value < INT64_MIN or value > INT64_MAX:
        raise InvalidFieldValue(ErrorStrings.ERR_INT_OUT_OF_RANGE.format(name, value))
    return Integer(value)


def classify(value: Any, name: str = "value", strict: bool = False) -> TypedValue:
    """
    Decide the wire type of a single scalar.

    Numbers without a fractional part become Integer, so 3.0 is written as 3i.
    Strings like "42i" are coerced to Integer. Other types are stringified
    unless strict is set, in which case UnsupportedFieldType is raised.
    """
    if isinstance(value, bool):
        return Boolean(value)

    if isinstance(value, int):
        return _integer(name, value)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidFieldValue(ErrorStrings.ERR_FLOAT_NOT_FINITE.format(name, value))
        if value.is_integer():
            return _integer(name, int(value))
        return Float(value)

    if isinstance(value, str):
        if _INT_LITERAL.fullmatch(value):
            return _integer(name, int(value[:-1]))
        return String(value)

    if strict:
        raise UnsupportedFieldType(
            ErrorStrings.ERR_UNSUPPORTED_TYPE.format(name, type(value).__name__)
        )
    return String(to_text(value))
