from typing import Any, Callable, ClassVar, List, Optional, Protocol, Type

import structlog

from ..config import (
    BatchNodeConfig,
    InfluxConnectionConfig,
    InNodeConfig,
    NodeDefinition,
    OutNodeConfig,
)
from ..domain.errors import ClientConstructionFailure, MissingClient, MissingQuery
from ..domain.interfaces import DoneCallback, IInfluxClient, Message, SendCallback
from ..resources.strings import ErrorStrings
from .dispatch import DispatchAdapter
from .payload_normalizer import PayloadNormalizer, resolve_measurement
from .point_builder import PointBuilder

logger = structlog.get_logger()

# Reserved message key for failure diagnostics
ERROR_KEY = "influx_error"

ClientFactory = Callable[..., IInfluxClient]


class NodeContext(Protocol):
    """
    What a node may ask of the runtime while it is being constructed.
    """
    client_factory: ClientFactory

    def get_node(self, node_id: Optional[str]) -> Optional["BaseNode"]:
        ...


class BaseNode:
    """
    Common lifecycle for all node types.
    """
    type: ClassVar[str]
    config_model: ClassVar[Type[NodeDefinition]] = NodeDefinition
    is_config: ClassVar[bool] = False

    def __init__(self, config: NodeDefinition, context: NodeContext):
        self.config = config
        self.id = config.id
        self.name = config.name
        self.wires: List[List[str]] = config.wires
        self._log = logger.bind(node_id=self.id, node_type=self.type)

    async def on_input(self, msg: Message, send: SendCallback, done: DoneCallback) -> None:
        done()

    def close(self) -> None:
        pass

    def _fail(self, msg: Message, done: DoneCallback, error: BaseException) -> None:
        msg[ERROR_KEY] = {"errorMessage": str(error)}
        self._log.warning("influx_node_failed", error=str(error), error_type=type(error).__name__)
        done(error)


class InfluxDB3ConfigNode(BaseNode):
    """
    Shared connection. Builds the client once at start and closes it once at teardown.
    A construction failure leaves the node without a client for its whole lifetime.
    """
    type = "influxdb3-config"
    config_model = InfluxConnectionConfig
    is_config = True

    def __init__(self, config: InfluxConnectionConfig, context: NodeContext):
        super().__init__(config, context)
        self.database = config.database
        self.client: Optional[IInfluxClient] = None
        self.construction_error: Optional[ClientConstructionFailure] = None
        self._closed = False

        try:
            self.client = context.client_factory(**config.client_options())
            self._log.info(
                "influx_client_created",
                host=config.url,
                database=config.database,
                timeout_ms=config.timeout_ms,
            )
        except Exception as e:
            self.construction_error = ClientConstructionFailure(
                ErrorStrings.ERR_CLIENT_CONSTRUCTION.format(e)
            )
            self._log.error("influx_client_failed", error=str(e))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.client is not None:
            self.client.close()


class _ClientNode(BaseNode):
    """
    Base for nodes that talk to the database through a config node.
    """
    def __init__(self, config: Any, context: NodeContext):
        super().__init__(config, context)
        node = context.get_node(config.influxdb)
        self.influxdb: Optional[InfluxDB3ConfigNode] = node if isinstance(node, InfluxDB3ConfigNode) else None
        self._adapter: Optional[DispatchAdapter] = None

        if self.influxdb is None or self.influxdb.client is None:
            self._log.error("influx_client_missing", error=ErrorStrings.ERR_MISSING_CLIENT)
            return
        self._adapter = DispatchAdapter(self.influxdb.client)

    @property
    def inert(self) -> bool:
        return self._adapter is None

    def _database(self, msg: Message) -> Optional[str]:
        return msg.get("database") or self.influxdb.database

    async def on_input(self, msg: Message, send: SendCallback, done: DoneCallback) -> None:
        if self._adapter is None:
            done(MissingClient())
            return
        try:
            await self._handle(msg, send)
        except Exception as e:
            self._fail(msg, done, e)
            return
        done()

    async def _handle(self, msg: Message, send: SendCallback) -> None:
        raise NotImplementedError


class InfluxDB3OutNode(_ClientNode):
    """
    Writes the message payload as one or more points of a single measurement.
    """
    type = "influxdb3 out"
    config_model = OutNodeConfig

    def __init__(self, config: OutNodeConfig, context: NodeContext):
        super().__init__(config, context)
        self.measurement = config.measurement
        self._normalizer = PayloadNormalizer(PointBuilder(strict=config.strict_field_types))

    async def _handle(self, msg: Message, send: SendCallback) -> None:
        measurement = resolve_measurement(msg, self.measurement)
        database = self._database(msg)
        points = self._normalizer.normalize(measurement, msg.get("payload"))
        written = await self._adapter.write_points(points, database)
        self._log.debug("influx_points_written", count=written, measurement=measurement, database=database)


class InfluxDB3BatchNode(_ClientNode):
    """
    Writes an array of {measurement, fields, tags, timestamp} records.
    """
    type = "influxdb3 batch"
    config_model = BatchNodeConfig

    def __init__(self, config: BatchNodeConfig, context: NodeContext):
        super().__init__(config, context)
        self._normalizer = PayloadNormalizer(PointBuilder(strict=config.strict_field_types))

    async def _handle(self, msg: Message, send: SendCallback) -> None:
        database = self._database(msg)
        points = self._normalizer.normalize_batch(msg.get("payload"))
        written = await self._adapter.write_points(points, database)
        self._log.debug("influx_batch_written", count=written, database=database)


class InfluxDB3InNode(_ClientNode):
    """
    Runs a query and forwards the materialized rows as msg.payload.
    """
    type = "influxdb3 in"
    config_model = InNodeConfig

    def __init__(self, config: InNodeConfig, context: NodeContext):
        super().__init__(config, context)
        self.query = config.query
        self.query_type = config.query_type

    async def _handle(self, msg: Message, send: SendCallback) -> None:
        database = self._database(msg)
        query = msg.get("query") or self.query
        query_type = msg.get("queryType") or self.query_type
        if not query:
            raise MissingQuery()

        rows = await self._adapter.query_rows(query, database, query_type)
        self._log.debug("influx_query_completed", rows=len(rows), query_type=query_type, database=database)
        msg["payload"] = rows
        send(msg)


NODE_TYPES = (InfluxDB3ConfigNode, InfluxDB3OutNode, InfluxDB3BatchNode, InfluxDB3InNode)
