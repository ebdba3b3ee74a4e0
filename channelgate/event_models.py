from pydantic import BaseModel, Field
from typing import Any, Dict
from enum import Enum


class Operation(str, Enum):
    """Channel operations a strategy can be bound to."""
    PUBLISH = "publish"
    SUBSCRIBE = "subscribe"


class Event(BaseModel):
    id: str = Field(..., min_length=1, description="Client-supplied id, also the store partition key")
    payload: Dict[str, Any] = Field(default_factory=dict)


class ResponseEvent(BaseModel):
    id: str
    # Stored record minus its id; still carries channel and timestamp
    payload: Dict[str, Any] = Field(default_factory=dict)
