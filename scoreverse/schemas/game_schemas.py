from pydantic import BaseModel, Field
from typing import Optional

class GameCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    points_per_win: int = 1
    min_players: int = Field(default=2, ge=1)
    max_players: Optional[int] = None
    description: Optional[str] = None
    icon: Optional[str] = None

class GameUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    points_per_win: Optional[int] = None
    min_players: Optional[int] = Field(default=None, ge=1)
    max_players: Optional[int] = None
    description: Optional[str] = None
    icon: Optional[str] = None
