from pydantic import BaseModel, Field
from typing import List
from ..event_models import Event, ResponseEvent

class PublishRequest(BaseModel):
    events: List[Event] = Field(default_factory=list)

class PublishResponse(BaseModel):
    events: List[ResponseEvent]

class ErrorResponse(BaseModel):
    error: str
    message: str
    correlation_id: str | None = None
