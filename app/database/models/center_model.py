from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime


class Center(Document):
    name: str = Field(..., description="Center name, first letter capitalised")
    user_id: Indexed(str) = Field(..., description="Owning user")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "centers"
