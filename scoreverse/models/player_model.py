from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

DEFAULT_WIN_RATE = 0.5
DEFAULT_AVERAGE_SCORE = 100.0

class PlayerModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1, max_length=100)
    avatar_url: Optional[str] = None
    # Only used as defaults for the AI handicap prompt
    win_rate: Optional[float] = Field(default=DEFAULT_WIN_RATE, ge=0, le=1)
    average_score: Optional[float] = DEFAULT_AVERAGE_SCORE
    owner_id: str

    class Config:
        from_attributes = True
