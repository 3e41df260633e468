import asyncio
from typing import Any, AsyncIterator, Dict, Optional

import structlog
from influxdb_client_3 import InfluxDBClient3, WriteOptions, WriteType, write_client_options

from ..domain.interfaces import IInfluxClient

logger = structlog.get_logger()


class InfluxDB3Client(IInfluxClient):
    """
    asyncio adapter over the synchronous InfluxDB 3 client.
    Each call runs in a worker thread so the event loop stays free while
    other messages are in flight.
    """
    def __init__(self, host: str, token: Optional[str], database: Optional[str], timeout_ms: int):
        # Synchronous write mode: every write returns or raises before the next one starts.
        # The SDK mutates the write options it is given, so each client owns its own.
        write_options = WriteOptions(write_type=WriteType.synchronous, timeout=timeout_ms)
        self._client = InfluxDBClient3(
            host=host,
            token=token,
            database=database,
            write_timeout=timeout_ms,
            query_timeout=timeout_ms,
            write_client_options=write_client_options(write_options=write_options),
        )
        self._closed = False

    async def write(self, line: str, database: str) -> None:
        await asyncio.to_thread(self._client.write, record=line, database=database)

    async def query(self, text: str, database: str, query_type: str = "sql") -> AsyncIterator[Dict[str, Any]]:
        table = await asyncio.to_thread(
            self._client.query,
            query=text,
            language=query_type,
            mode="all",
            database=database,
        )
        for row in table.to_pylist():
            yield row

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._client.close()
        logger.info("influx_client_closed")
