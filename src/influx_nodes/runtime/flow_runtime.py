import copy
import dataclasses
import uuid
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Tuple

import structlog

from ..application.nodes import BaseNode, ClientFactory
from ..domain.errors import InfluxNodeError, UnknownNode
from ..domain.interfaces import Message
from ..resources.strings import ErrorStrings
from .registry import NodeRegistry, default_registry

logger = structlog.get_logger()


@dataclasses.dataclass
class NodeFailure:
    """
    Failure signalled by a node through done(error).
    """
    node_id: str
    error: str
    message: Message


@dataclasses.dataclass
class InjectionResult:
    """
    Outcome of one injected message after it has travelled through the wires.
    `messages` holds what reached nodes without downstream wires.
    """
    messages: List[Message] = dataclasses.field(default_factory=list)
    failures: List[NodeFailure] = dataclasses.field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def error(self) -> Optional[str]:
        return self.failures[0].error if self.failures else None


class FlowRuntime:
    """
    Minimal in-process flow host: builds nodes from definitions,
    routes sent messages along wires and tears nodes down.
    """
    def __init__(self, client_factory: ClientFactory, registry: Optional[NodeRegistry] = None):
        self.client_factory = client_factory
        self._registry = registry or default_registry()
        self._nodes: Dict[str, BaseNode] = {}
        self._closed = False

    @property
    def nodes(self) -> List[BaseNode]:
        return list(self._nodes.values())

    def get_node(self, node_id: Optional[str]) -> Optional[BaseNode]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def load(self, definitions: Iterable[Mapping[str, Any]]) -> None:
        """
        Config nodes are built first so that others can resolve their references.
        """
        resolved = []
        for definition in definitions:
            node_cls = self._registry.get(definition.get("type"))
            resolved.append((node_cls, definition))

        resolved.sort(key=lambda item: not item[0].is_config)
        for node_cls, definition in resolved:
            config = node_cls.config_model.model_validate(definition)
            if config.id in self._nodes:
                raise InfluxNodeError(ErrorStrings.ERR_DUPLICATE_NODE.format(config.id))
            self._nodes[config.id] = node_cls(config, self)
            logger.info("node_loaded", node_id=config.id, node_type=node_cls.type)

    async def inject(self, node_id: str, msg: Message) -> InjectionResult:
        start = self.get_node(node_id)
        if start is None:
            raise UnknownNode(node_id)

        # every log line emitted while this message travels carries the same inject_id
        with structlog.contextvars.bound_contextvars(inject_id=uuid.uuid4().hex[:12], source_node=node_id):
            return await self._route(start, msg)

    async def _route(self, start: BaseNode, msg: Message) -> InjectionResult:
        result = InjectionResult()
        pending: Deque[Tuple[BaseNode, Message]] = deque([(start, msg)])
        while pending:
            node, message = pending.popleft()
            outbound, error = await self._run(node, message)
            if error is not None:
                result.failures.append(NodeFailure(node_id=node.id, error=str(error), message=message))
                continue

            targets = node.wires[0] if node.wires else []
            for sent in outbound:
                if not targets:
                    result.messages.append(sent)
                    continue
                for index, target_id in enumerate(targets):
                    target = self.get_node(target_id)
                    if target is None:
                        logger.warning("wire_target_missing", node_id=node.id, target_id=target_id)
                        continue
                    # first recipient gets the original, the rest get copies
                    pending.append((target, sent if index == 0 else copy.deepcopy(sent)))
        return result

    async def _run(self, node: BaseNode, msg: Message) -> Tuple[List[Message], Optional[Any]]:
        outbound: List[Message] = []
        signalled: List[Any] = []

        def send(message: Message) -> None:
            outbound.append(message)

        def done(error: Any = None) -> None:
            signalled.append(error)

        try:
            await node.on_input(msg, send, done)
        except Exception as e:
            logger.error("node_input_unhandled", node_id=node.id, error=str(e), exc_info=True)
            return outbound, e

        if not signalled:
            logger.debug("node_done_not_called", node_id=node.id)
            return outbound, None
        return outbound, signalled[0]

    def close(self) -> None:
        """
        Closes processing nodes first and config nodes (client handles) last.
        """
        if self._closed:
            return
        self._closed = True
        for node in sorted(self._nodes.values(), key=lambda n: n.is_config):
            try:
                node.close()
            except Exception as e:
                logger.error("node_close_failed", node_id=node.id, error=str(e))
        logger.info("flow_runtime_closed", nodes=len(self._nodes))
