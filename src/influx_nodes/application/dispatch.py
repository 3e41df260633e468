import math
from typing import Any, Dict, List, Sequence

import structlog
from influxdb_client_3 import Point

from ..domain.errors import InvalidPayload
from ..domain.interfaces import IInfluxClient
from ..domain.models import DataPoint
from ..resources.strings import ErrorStrings

logger = structlog.get_logger()

QUERY_TYPE_SQL = "sql"
QUERY_TYPE_INFLUXQL = "influxql"


def to_line_protocol(data_point: DataPoint) -> str:
    """
    Serialize a DataPoint with the client library's Point encoder.
    Callers skip degenerate points before serializing.
    """
    point = Point(data_point.measurement)
    for name, value in data_point.tags.items():
        point.tag(name, value)
    for name, typed in data_point.fields.items():
        point.field(name, typed.value)
    if data_point.timestamp is not None:
        point.time(_wire_timestamp(data_point.timestamp))
    return point.to_line_protocol()


def _wire_timestamp(timestamp: Any) -> Any:
    # The encoder only accepts int, str and datetime; whole floats such as 1.7e18 pass as int.
    if isinstance(timestamp, float):
        if not math.isfinite(timestamp) or not timestamp.is_integer():
            raise InvalidPayload(ErrorStrings.ERR_INVALID_TIMESTAMP.format(timestamp))
        return int(timestamp)
    return timestamp


def resolve_query_type(query_type: Any) -> str:
    return QUERY_TYPE_INFLUXQL if query_type == QUERY_TYPE_INFLUXQL else QUERY_TYPE_SQL


class DispatchAdapter:
    """
    Issues writes and queries against the injected client.
    Writes for one message go out strictly one at a time, in order.
    """
    def __init__(self, client: IInfluxClient):
        self._client = client

    async def write_points(self, points: Sequence[DataPoint], database: str) -> int:
        """
        Returns the number of points actually written.
        """
        written = 0
        for data_point in points:
            if data_point.is_degenerate:
                logger.debug("influx_point_skipped", measurement=data_point.measurement, reason="no_fields")
                continue
            await self._client.write(to_line_protocol(data_point), database)
            written += 1
        return written

    async def query_rows(self, query: str, database: str, query_type: Any = QUERY_TYPE_SQL) -> List[Dict[str, Any]]:
        """
        Drain the row sequence into a list; callers never receive a live cursor.
        """
        rows = []
        async for row in self._client.query(query, database, resolve_query_type(query_type)):
            rows.append(row)
        return rows
