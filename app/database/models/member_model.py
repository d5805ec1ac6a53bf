from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime
from typing import Optional


class Member(Document):
    name: str = Field(..., description="Member name, each word capitalised")
    center_id: Indexed(str) = Field(..., description="Owning center")
    cibil: Optional[str] = Field(None, description="3-digit CIBIL code if already known")
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "members"
