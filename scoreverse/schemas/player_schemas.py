from pydantic import BaseModel, Field
from typing import Optional

class PlayerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    avatar_url: Optional[str] = None
    win_rate: Optional[float] = Field(default=None, ge=0, le=1)
    average_score: Optional[float] = None

class PlayerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    avatar_url: Optional[str] = None
