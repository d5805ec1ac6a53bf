from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class MemberCreate(BaseModel):
    name: str = Field(..., min_length=1)
    center_id: str = Field(..., alias="centerId")
    cibil: Optional[str] = Field(None, pattern=r"^\d{3}$")
    date_of_birth: Optional[str] = Field(None, alias="dateofbirth")
    gender: Optional[str] = None

    class Config:
        populate_by_name = True

class MemberResponse(BaseModel):
    id: str
    name: str
    center_id: str
    cibil: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    loan_submitted: bool = False
    created_at: Optional[datetime] = None
