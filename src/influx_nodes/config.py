import math
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator


class NodeDefinition(BaseModel):
    """
    Common part of every node definition in a flows file.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., description="Unique node id")
    type: str = Field(..., description="Registered node type name")
    name: Optional[str] = Field(default=None, description="Display name")
    wires: List[List[str]] = Field(default_factory=list, description="Downstream node ids per output")


class InfluxConnectionConfig(NodeDefinition):
    """
    Configuration node holding the shared client connection.
    """
    host: str = Field(..., description="InfluxDB 3 host, with scheme")
    port: Optional[int] = Field(default=None, description="Port appended to host when set")
    database: Optional[str] = Field(default=None, description="Default database")
    token: Optional[SecretStr] = Field(default=None, description="Auth token")
    timeout: float = Field(default=10, description="Request timeout in seconds")

    @model_validator(mode="before")
    @classmethod
    def _lift_credentials(cls, data: Any) -> Any:
        # Host-style definitions keep secrets under "credentials"
        if not isinstance(data, dict) or "credentials" not in data:
            return data
        data = dict(data)
        credentials = data.pop("credentials") or {}
        if "token" not in data and isinstance(credentials, dict) and credentials.get("token"):
            data["token"] = credentials["token"]
        return data

    @field_validator("timeout", mode="before")
    @classmethod
    def _default_timeout(cls, value: Any) -> Any:
        # 0 or empty falls back to the default, like an unset field
        return value or 10

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0:
            raise ValueError("timeout must be a positive number of seconds")
        return value

    @property
    def url(self) -> str:
        return f"{self.host}:{self.port}" if self.port else self.host

    @property
    def timeout_ms(self) -> int:
        return math.floor(self.timeout * 1000)

    def client_options(self) -> Dict[str, Any]:
        """Keyword arguments for the client factory."""
        return {
            "host": self.url,
            "token": self.token.get_secret_value() if self.token else None,
            "database": self.database,
            "timeout_ms": self.timeout_ms,
        }


class WriteNodeConfig(NodeDefinition):
    influxdb: Optional[str] = Field(default=None, description="Id of the influxdb3-config node")
    strict_field_types: bool = Field(
        default=False,
        description="Reject unsupported field types instead of stringifying them"
    )


class OutNodeConfig(WriteNodeConfig):
    measurement: Optional[str] = Field(default=None, description="Default measurement")


class BatchNodeConfig(WriteNodeConfig):
    pass


class InNodeConfig(NodeDefinition):
    influxdb: Optional[str] = Field(default=None, description="Id of the influxdb3-config node")
    query: Optional[str] = Field(default=None, description="Default query text")
    query_type: Literal["sql", "influxql"] = Field(default="sql", alias="queryType")

    @field_validator("query_type", mode="before")
    @classmethod
    def _default_query_type(cls, value: Any) -> Any:
        return value or "sql"
