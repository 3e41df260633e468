from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional

class InjectRequest(BaseModel):
    """Message injected into a node. Unknown keys are carried through."""
    model_config = ConfigDict(extra="allow")

    payload: Any = None
    measurement: Optional[str] = None
    database: Optional[str] = None
    query: Optional[str] = None
    queryType: Optional[str] = None

class NodeInfo(BaseModel):
    id: str
    type: str
    name: Optional[str] = None

class InjectResponse(BaseModel):
    status: str
    messages: List[Dict[str, Any]] = []
    error: Optional[str] = None
    message: Optional[Dict[str, Any]] = None
