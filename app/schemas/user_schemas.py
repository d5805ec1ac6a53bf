from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Display name of the field officer")
    email: EmailStr = Field(..., description="Email address of the user")
    password: str = Field(..., min_length=6, description="Password for the user account")

class UserResponse(BaseModel):
    id: str = Field(..., description="Unique identifier for the user")
    name: str = Field(..., description="Display name of the user")
    email: EmailStr = Field(..., description="Email address of the user")
    is_admin: bool = Field(default=False, description="Whether the user can review loans")
    blocked: bool = Field(default=False, description="Blocked users cannot log in")
    created_at: Optional[datetime] = None
    message: Optional[str] = None

    class Config:
        from_attributes = True

class Token(BaseModel):
    access_token: str = Field(..., description="Access token for the user")
    token_type: str = Field(default="bearer", description="Type of the token")
    user: Optional[UserResponse] = None

class UserBlockUpdate(BaseModel):
    blocked: bool
