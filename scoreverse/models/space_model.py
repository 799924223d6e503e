from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

class SpaceModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1, max_length=100)
    share_id: Optional[str] = None # set while the space is publicly shared
    owner_id: str

    class Config:
        from_attributes = True
