from typing import Any, AsyncIterator, Callable, Dict, Protocol

Message = Dict[str, Any]
SendCallback = Callable[[Message], None]
DoneCallback = Callable[..., None]


class IInfluxClient(Protocol):
    """
    Interface of the time-series database client the nodes are written against.
    """
    async def write(self, line: str, database: str) -> None:
        """
        Asynchronously write one line-protocol record into the database.
        """
        ...

    def query(self, text: str, database: str, query_type: str = "sql") -> AsyncIterator[Dict[str, Any]]:
        """
        Run a query ("sql" or "influxql") and yield result rows as dicts.
        """
        ...

    def close(self) -> None:
        ...

