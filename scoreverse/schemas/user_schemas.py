from pydantic import BaseModel, EmailStr
from typing import Optional

class UserRead(BaseModel):
    id: str
    username: str
    email: Optional[EmailStr] = None
    is_admin: bool = False
    share_id: Optional[str] = None

    class Config:
        from_attributes = True
