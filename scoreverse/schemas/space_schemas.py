from pydantic import BaseModel, Field
from typing import Optional

class SpaceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)

class SpaceUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)

class ActiveSpaceRequest(BaseModel):
    space_id: Optional[str] = None # None switches back to the global context

class ActiveSpaceRead(BaseModel):
    space_id: Optional[str] = None
    scope: str
