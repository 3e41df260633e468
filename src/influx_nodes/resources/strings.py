"""
Centralized storage for all user-facing error strings of the nodes.
Prevents "magic strings" in code and keeps messages stable for flow authors.
"""

class ErrorStrings:
    # Validation
    ERR_MISSING_MEASUREMENT = "Missing measurement"
    ERR_MISSING_QUERY = "Missing query"
    ERR_BATCH_NOT_ARRAY = "Payload must be an array"
    ERR_EMPTY_PAYLOAD = "Payload array must contain a fields object"
    ERR_FIELDS_NOT_OBJECT = "Fields must be an object, got {}"
    ERR_TAGS_NOT_OBJECT = "Tags must be an object, got {}"
    ERR_INVALID_TIMESTAMP = "Timestamp {} must be a whole number, string or datetime"

    # Field values
    ERR_INT_OUT_OF_RANGE = "Field '{}' integer value {} is out of int64 range"
    ERR_FLOAT_NOT_FINITE = "Field '{}' float value {} is not finite"
    ERR_UNSUPPORTED_TYPE = "Field '{}' has unsupported type {}"

    # Client
    ERR_MISSING_CLIENT = "Missing InfluxDB 3 client"
    ERR_CLIENT_CONSTRUCTION = "Failed to create InfluxDB 3 client: {}"

    # Runtime
    ERR_UNKNOWN_NODE_TYPE = "Unknown node type: {}"
    ERR_UNKNOWN_NODE = "Unknown node: {}"
    ERR_DUPLICATE_NODE = "Duplicate node id: {}"
