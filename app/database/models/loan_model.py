from beanie import Document, Indexed
from pydantic import Field
from typing import Optional
from datetime import datetime

from app.schemas.loan_schema import LoanStatusEnum


class Loan(Document):
    """Flat loan record: a snapshot of the submitted form plus storage keys.

    Only `status` changes after insert.
    """
    loan_id: Indexed(str, unique=True) = Field(..., description="Human-readable sequence id (LN-<digits>)")

    user_id: Optional[str] = Field(None, description="Field officer who submitted the application")
    center_id: Optional[str] = None
    member_id: Optional[str] = None

    # Member details
    member_cibil: Optional[str] = None
    person_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    religion: Optional[str] = None
    marital_status: Optional[str] = None
    aadhar_no: Optional[str] = None
    member_work: Optional[str] = None
    annual_income: Optional[str] = None

    # Nominee details
    nominee_name: Optional[str] = None
    nominee_dob: Optional[str] = None
    nominee_gender: Optional[str] = None
    nominee_religion: Optional[str] = None
    nominee_marital_status: Optional[str] = None
    nominee_relationship: Optional[str] = None
    nominee_business: Optional[str] = None

    # Contact
    mobile_no: Optional[str] = None
    nominee_mobile: Optional[str] = None
    member_email: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None

    # Storage keys, one per document slot
    member_aadhaar_front: Optional[str] = None
    member_aadhaar_back: Optional[str] = None
    nominee_aadhaar_front: Optional[str] = None
    nominee_aadhaar_back: Optional[str] = None
    pan_card: Optional[str] = None
    form_image: Optional[str] = None
    signature: Optional[str] = None
    member_photo: Optional[str] = None
    passbook_image: Optional[str] = None

    status: LoanStatusEnum = Field(default=LoanStatusEnum.pending)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "loans"

    class Config:
        populate_by_name = True
        json_encoders = {datetime: lambda v: v.isoformat()}
