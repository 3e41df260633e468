from typing import Dict, Iterable, List, Type

from ..application.nodes import NODE_TYPES, BaseNode
from ..domain.errors import UnknownNodeType


class NodeRegistry:
    """
    Maps node type names to node classes.
    """
    def __init__(self, node_types: Iterable[Type[BaseNode]] = ()):
        self._types: Dict[str, Type[BaseNode]] = {}
        for node_cls in node_types:
            self.register(node_cls)

    def register(self, node_cls: Type[BaseNode]) -> Type[BaseNode]:
        self._types[node_cls.type] = node_cls
        return node_cls

    def get(self, type_name: str) -> Type[BaseNode]:
        try:
            return self._types[type_name]
        except KeyError:
            raise UnknownNodeType(type_name) from None

    def types(self) -> List[str]:
        return sorted(self._types)


def default_registry() -> NodeRegistry:
    return NodeRegistry(NODE_TYPES)
