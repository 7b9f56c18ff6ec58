from typing import Any

from pydantic import BaseModel, Field


class ChannelFrame(BaseModel):
    """A named event with its positional arguments, one per WebSocket text frame."""
    event: str
    args: list[Any] = Field(default_factory=list)
