from typing import Literal, Optional
from pydantic import BaseModel, Field

class StartRequest(BaseModel):
    """Match start request schema."""
    seed: int = 42
    autorun: bool = False
    tick_ms: int = Field(default=500, ge=10, le=10000)
    max_turns: int = Field(default=200, ge=1)

class StepRequest(BaseModel):
    """Manual advance request schema."""
    turns: int = Field(default=1, ge=1, le=1000)

class StepResponse(BaseModel):
    played: int
    turn: int
    finished: bool
    scores: dict[str, int]

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: list[dict]

TeamName = Optional[Literal["blue", "red"]]
