from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, EmailStr

class UserModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    username: str = Field(min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    hashed_password: str
    is_admin: bool = False
    share_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        from_attributes = True
