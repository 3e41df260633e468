from typing import Any, List, Mapping, Optional

import structlog

from ..domain.errors import InvalidBatchPayload, InvalidPayload, MissingMeasurement
from ..domain.interfaces import Message
from ..domain.models import BatchItem, DataPoint
from ..resources.strings import ErrorStrings
from .point_builder import PointBuilder

logger = structlog.get_logger()

# Field name used for bare scalar payloads
SCALAR_FIELD = "value"


def resolve_measurement(msg: Message, default: Optional[str]) -> str:
    """
    Message override first, node default second.
    """
    measurement = msg.get("measurement") or default
    if not measurement:
        raise MissingMeasurement()
    return str(measurement)


class PayloadNormalizer:
    """
    Maps inbound payload shapes to DataPoint records.

    Single-point path shapes:
      [[fields, tags], [fields, tags], ...]  one point per pair
      [fields, tags]                         one point, tags optional
      {field: value, ...}                    one point, no tags
      scalar                                 one point with a "value" field
    """
    def __init__(self, builder: Optional[PointBuilder] = None):
        self._builder = builder or PointBuilder()

    def normalize(self, measurement: str, payload: Any) -> List[DataPoint]:
        if isinstance(payload, list):
            if not payload:
                raise InvalidPayload(ErrorStrings.ERR_EMPTY_PAYLOAD)
            if isinstance(payload[0], list):
                return [self._from_pair(measurement, pair) for pair in payload]
            return [self._from_pair(measurement, payload)]

        if isinstance(payload, Mapping):
            return [self._builder.build(measurement, payload)]

        return [self._builder.build(measurement, {SCALAR_FIELD: payload}, time_key=None)]

    def normalize_batch(self, payload: Any) -> List[DataPoint]:
        """
        Batch items carry their own measurement and a sibling "timestamp".
        A "time" key inside batch fields is an ordinary field.
        """
        if not isinstance(payload, list):
            raise InvalidBatchPayload()

        points = []
        for index, record in enumerate(payload):
            item = BatchItem.from_record(record)
            if item is None:
                logger.debug("batch_item_skipped", index=index)
                continue
            point = self._builder.build(item.measurement, item.fields, item.tags, time_key=None)
            if item.timestamp is not None:
                point.timestamp = item.timestamp
            points.append(point)
        return points

    def _from_pair(self, measurement: str, pair: Any) -> DataPoint:
        if not isinstance(pair, list) or not pair:
            raise InvalidPayload(ErrorStrings.ERR_EMPTY_PAYLOAD)
        fields = pair[0]
        tags = pair[1] if len(pair) > 1 else None
        return self._builder.build(measurement, fields, tags)
