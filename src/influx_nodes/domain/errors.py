from ..resources.strings import ErrorStrings


class InfluxNodeError(Exception):
    """Base class for errors raised by the nodes themselves."""


class MissingMeasurement(InfluxNodeError):
    def __init__(self) -> None:
        super().__init__(ErrorStrings.ERR_MISSING_MEASUREMENT)


class MissingQuery(InfluxNodeError):
    def __init__(self) -> None:
        super().__init__(ErrorStrings.ERR_MISSING_QUERY)


class MissingClient(InfluxNodeError):
    def __init__(self) -> None:
        super().__init__(ErrorStrings.ERR_MISSING_CLIENT)


class InvalidBatchPayload(InfluxNodeError, TypeError):
    def __init__(self) -> None:
        super().__init__(ErrorStrings.ERR_BATCH_NOT_ARRAY)


class InvalidPayload(InfluxNodeError, TypeError):
    """Payload shape cannot be mapped to fields and tags."""


class InvalidFieldValue(InfluxNodeError, ValueError):
    """Value has a supported type but cannot be carried by line protocol."""


class UnsupportedFieldType(InfluxNodeError, TypeError):
    """Raised only when strict field typing is enabled."""


class ClientConstructionFailure(InfluxNodeError):
    """Client could not be built from configuration. Terminal for the config node."""


class UnknownNodeType(InfluxNodeError):
    def __init__(self, node_type: str) -> None:
        super().__init__(ErrorStrings.ERR_UNKNOWN_NODE_TYPE.format(node_type))
        self.node_type = node_type


class UnknownNode(InfluxNodeError, KeyError):
    def __init__(self, node_id: str) -> None:
        super().__init__(ErrorStrings.ERR_UNKNOWN_NODE.format(node_id))
        self.node_id = node_id

    def __str__(self) -> str:
        return self.args[0]
