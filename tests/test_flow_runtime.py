import pytest
import structlog
from pydantic import ValidationError
from src.influx_nodes.application.nodes import BaseNode
from src.influx_nodes.domain.errors import InfluxNodeError, UnknownNode, UnknownNodeType
from src.influx_nodes.runtime.flow_runtime import FlowRuntime
from src.influx_nodes.runtime.registry import NodeRegistry, default_registry


def test_default_registry_types():
    assert default_registry().types() == [
        "influxdb3 batch",
        "influxdb3 in",
        "influxdb3 out",
        "influxdb3-config",
    ]


def test_config_nodes_load_before_their_users(client_factory, config_definition):
    rt = FlowRuntime(client_factory=client_factory)
    # config node listed last on purpose
    rt.load([{"id": "out", "type": "influxdb3 out", "influxdb": "cfg", "measurement": "m"}, config_definition])

    assert not rt.get_node("out").inert


def test_unknown_type_is_rejected(client_factory):
    rt = FlowRuntime(client_factory=client_factory)
    with pytest.raises(UnknownNodeType):
        rt.load([{"id": "x", "type": "mqtt in"}])


def test_duplicate_ids_are_rejected(client_factory, config_definition):
    rt = FlowRuntime(client_factory=client_factory)
    with pytest.raises(InfluxNodeError):
        rt.load([config_definition, dict(config_definition)])


def test_invalid_definition_is_rejected(client_factory):
    rt = FlowRuntime(client_factory=client_factory)
    with pytest.raises(ValidationError):
        rt.load([{"id": "in", "type": "influxdb3 in", "queryType": "flux"}])


@pytest.mark.asyncio
async def test_inject_unknown_node(runtime):
    with pytest.raises(UnknownNode):
        await runtime.inject("missing", {"payload": 1})


@pytest.mark.asyncio
async def test_inject_collects_unwired_output(client_builder, config_definition):
    client = client_builder(rows=[{"a": 1}])
    rt = FlowRuntime(client_factory=lambda **options: client)
    rt.load([config_definition, {"id": "in", "type": "influxdb3 in", "influxdb": "cfg", "query": "SELECT a FROM m"}])

    result = await rt.inject("in", {"topic": "poll"})

    assert result.ok
    assert result.messages == [{"topic": "poll", "payload": [{"a": 1}]}]


@pytest.mark.asyncio
async def test_inject_routes_along_wires(client_builder, config_definition):
    client = client_builder(rows=[{"a": 1}, {"a": 2}])
    rt = FlowRuntime(client_factory=lambda **options: client)
    rt.load([
        config_definition,
        {"id": "in", "type": "influxdb3 in", "influxdb": "cfg", "query": "SELECT a FROM m", "wires": [["copy"]]},
        {"id": "copy", "type": "influxdb3 out", "influxdb": "cfg", "measurement": "mirror"},
    ])

    result = await rt.inject("in", {})

    assert result.ok
    # a list of objects is read as one [fields, tags] pair
    client.write.assert_awaited_once_with("mirror,a=2 a=1i", "sensors")
    assert result.messages == []


@pytest.mark.asyncio
async def test_inject_reports_failures(runtime):
    result = await runtime.inject("out", {"payload": {"x": 1}, "measurement": ""})

    assert result.ok  # default measurement still applies

    result = await runtime.inject("batch", {"payload": "nope"})
    assert not result.ok
    assert result.error == "Payload must be an array"
    assert result.failures[0].node_id == "batch"
    assert result.failures[0].message["influx_error"] == {"errorMessage": "Payload must be an array"}


def test_close_closes_clients_once(runtime, mock_client):
    runtime.close()
    runtime.close()
    mock_client.close.assert_called_once()


class ContextRecorder(BaseNode):
    type = "context recorder"
    seen = []

    async def on_input(self, msg, send, done):
        ContextRecorder.seen.append((self.id, structlog.contextvars.get_contextvars()))
        send(msg)
        done()


@pytest.mark.asyncio
async def test_inject_binds_log_context_for_the_whole_flow(client_factory):
    ContextRecorder.seen = []
    rt = FlowRuntime(client_factory=client_factory, registry=NodeRegistry([ContextRecorder]))
    rt.load([
        {"id": "first", "type": "context recorder", "wires": [["second"]]},
        {"id": "second", "type": "context recorder"},
    ])

    await rt.inject("first", {"payload": 1})
    await rt.inject("first", {"payload": 2})

    assert [node_id for node_id, _ in ContextRecorder.seen] == ["first", "second", "first", "second"]
    contexts = [context for _, context in ContextRecorder.seen]
    assert all(context["source_node"] == "first" for context in contexts)
    assert contexts[0]["inject_id"] == contexts[1]["inject_id"]
    assert contexts[0]["inject_id"] != contexts[2]["inject_id"]
    assert "inject_id" not in structlog.contextvars.get_contextvars()
