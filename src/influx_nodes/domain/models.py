import dataclasses
from typing import Any, Dict, Mapping, Optional, Union


@dataclasses.dataclass(frozen=True)
class Integer:
    """Signed 64-bit integer field value."""
    value: int


@dataclasses.dataclass(frozen=True)
class Float:
    """64-bit float field value."""
    value: float


@dataclasses.dataclass(frozen=True)
class Boolean:
    value: bool


@dataclasses.dataclass(frozen=True)
class String:
    value: str


TypedValue = Union[Integer, Float, Boolean, String]


@dataclasses.dataclass
class DataPoint:
    """
    A single time-series point, built per inbound item and discarded after write.
    Timestamp is kept as received and handed to the client library untouched.
    """
    measurement: str
    fields: Dict[str, TypedValue] = dataclasses.field(default_factory=dict)
    tags: Dict[str, str] = dataclasses.field(default_factory=dict)
    timestamp: Optional[Any] = None

    @property
    def is_degenerate(self) -> bool:
        """A point without fields has nothing to write."""
        return not self.fields


@dataclasses.dataclass(frozen=True)
class BatchItem:
    """
    One record of a bulk write request.
    """
    measurement: str
    fields: Mapping[str, Any]
    tags: Optional[Mapping[str, Any]] = None
    timestamp: Optional[Any] = None

    @classmethod
    def from_record(cls, record: Any) -> Optional["BatchItem"]:
        """
        Returns None for records the batch path skips:
        non-mappings, empty or missing measurement, missing fields mapping.
        """
        if not isinstance(record, Mapping):
            return None
        measurement = record.get("measurement")
        fields = record.get("fields")
        if not measurement or not isinstance(fields, Mapping):
            return None
        tags = record.get("tags")
        return cls(
            measurement=str(measurement),
            fields=fields,
            tags=tags if isinstance(tags, Mapping) else None,
            timestamp=record.get("timestamp") or None,
        )
