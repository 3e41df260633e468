import pytest
from unittest.mock import MagicMock, AsyncMock

from src.influx_nodes.runtime.flow_runtime import FlowRuntime


async def _rows(rows):
    for row in rows:
        yield row


def make_client(rows=None):
    """Client double: write is awaited, query yields the given rows."""
    client = MagicMock()
    client.write = AsyncMock()
    client.query = MagicMock(side_effect=lambda *args, **kwargs: _rows(list(rows or [])))
    return client


@pytest.fixture
def client_builder():
    return make_client


@pytest.fixture
def mock_client():
    return make_client()


@pytest.fixture
def client_factory(mock_client):
    return MagicMock(return_value=mock_client)


@pytest.fixture
def config_definition():
    return {
        "id": "cfg",
        "type": "influxdb3-config",
        "host": "http://localhost",
        "port": 8181,
        "database": "sensors",
        "credentials": {"token": "s3cret"},
        "timeout": 5,
    }


@pytest.fixture
def runtime(client_factory, config_definition):
    rt = FlowRuntime(client_factory=client_factory)
    rt.load([
        config_definition,
        {"id": "out", "type": "influxdb3 out", "influxdb": "cfg", "measurement": "temperature"},
        {"id": "batch", "type": "influxdb3 batch", "influxdb": "cfg"},
        {"id": "in", "type": "influxdb3 in", "influxdb": "cfg", "query": "SELECT * FROM temperature"},
    ])
    yield rt
    rt.close()


class Signals:
    """Records send/done calls made by a node."""
    def __init__(self):
        self.sent = []
        self.done_calls = []

    def send(self, msg):
        self.sent.append(msg)

    def done(self, error=None):
        self.done_calls.append(error)

    @property
    def error(self):
        assert len(self.done_calls) == 1, "done must be called exactly once"
        return self.done_calls[0]


@pytest.fixture
def signals():
    return Signals()
