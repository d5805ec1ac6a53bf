from beanie import Document, Indexed
from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional
from bson import ObjectId

class User(Document):
    name: str = Field(..., description="Display name of the user")
    email: Indexed(EmailStr, unique=True) = Field(..., description="Lower-cased email address of the user")
    hashed_password: str = Field(..., description="Hashed password for the user account")
    is_admin: bool = Field(default=False, description="Admins review and approve loans")
    blocked: bool = Field(default=False, description="Blocked users cannot log in")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Timestamp when the user was created")
    updated_at: Optional[datetime] = Field(None, description="Timestamp when the user was last updated")

    class Settings:
        name = "users"

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        json_encoders = {
            ObjectId: str,
            datetime: lambda v: v.isoformat()
        }
