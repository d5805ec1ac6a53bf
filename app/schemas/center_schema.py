from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class CenterCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Center name, unique per user")

class CenterResponse(BaseModel):
    id: str
    name: str
    user_id: str
    created_at: Optional[datetime] = None
