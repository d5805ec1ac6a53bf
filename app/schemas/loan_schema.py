from pydantic import BaseModel, Field
from enum import Enum
from typing import Dict, Any, Optional, List
from datetime import datetime

from fastapi import Form


class LoanStatusEnum(str, Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"
    credited = "CREDITED"


# CREDITED is set by the disbursement side once money has moved
ALLOWED_STATUS_TRANSITIONS = {
    LoanStatusEnum.pending: {LoanStatusEnum.approved, LoanStatusEnum.rejected},
    LoanStatusEnum.approved: {LoanStatusEnum.credited},
    LoanStatusEnum.rejected: set(),
    LoanStatusEnum.credited: set(),
}


class MemberGenderEnum(str, Enum):
    female = "Female"

class ReligionEnum(str, Enum):
    hindu = "Hindu"
    muslim = "Muslim"
    christian = "Christian"
    other = "Other"

class MemberMaritalStatusEnum(str, Enum):
    married = "Married"
    divorced = "Divorced"
    widowed = "Widowed"


class LoanFormFields(BaseModel):
    """Scalar part of a loan draft, keyed by the wire names of the form."""
    member_cibil: str = Field("", alias="memberCibil")
    person_name: str = Field("", alias="personName")
    date_of_birth: str = Field("", alias="dateofbirth")
    gender: str = Field("", alias="gender")
    religion: str = Field("", alias="religion")
    marital_status: str = Field("", alias="maritalStatus")
    aadhar_no: str = Field("", alias="aadharNo")
    member_work: str = Field("", alias="memberwork")
    annual_income: str = Field("", alias="annualIncome")

    nominee_name: str = Field("", alias="nomineeName")
    nominee_dob: str = Field("", alias="nomineeDob")
    nominee_gender: str = Field("", alias="nomineeGender")
    nominee_religion: str = Field("", alias="nomineeReligion")
    nominee_marital_status: str = Field("", alias="nomineeMaritalStatus")
    nominee_relationship: str = Field("", alias="nomineeRelationship")
    nominee_business: str = Field("", alias="nomineeBusiness")

    mobile_no: str = Field("", alias="mobileNo")
    nominee_mobile: str = Field("", alias="nomineeMobile")
    member_email: str = Field("", alias="memberEmail")
    address: str = Field("", alias="address")
    pincode: str = Field("", alias="pincode")

    class Config:
        populate_by_name = True

    def to_wire(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


# wire name -> model attribute, in declaration order
FORM_FIELD_NAMES: Dict[str, str] = {
    field.alias: name for name, field in LoanFormFields.model_fields.items()
}


class LoanSubmissionForm:
    """Form-field dependency for the multipart loan upload."""

    def __init__(
        self,
        userId: Optional[str] = Form(None),
        centerId: Optional[str] = Form(None),
        memberId: Optional[str] = Form(None),
        memberCibil: Optional[str] = Form(None),
        personName: Optional[str] = Form(None),
        dateofbirth: Optional[str] = Form(None),
        gender: Optional[str] = Form(None),
        religion: Optional[str] = Form(None),
        maritalStatus: Optional[str] = Form(None),
        aadharNo: Optional[str] = Form(None),
        memberwork: Optional[str] = Form(None),
        annualIncome: Optional[str] = Form(None),
        nomineeName: Optional[str] = Form(None),
        nomineeDob: Optional[str] = Form(None),
        nomineeGender: Optional[str] = Form(None),
        nomineeReligion: Optional[str] = Form(None),
        nomineeMaritalStatus: Optional[str] = Form(None),
        nomineeRelationship: Optional[str] = Form(None),
        nomineeBusiness: Optional[str] = Form(None),
        mobileNo: Optional[str] = Form(None),
        nomineeMobile: Optional[str] = Form(None),
        memberEmail: Optional[str] = Form(None),
        address: Optional[str] = Form(None),
        pincode: Optional[str] = Form(None),
    ):
        self.user_id = userId
        self.center_id = centerId
        self.member_id = memberId
        self.fields = LoanFormFields(
            memberCibil=memberCibil or "",
            personName=personName or "",
            dateofbirth=dateofbirth or "",
            gender=gender or "",
            religion=religion or "",
            maritalStatus=maritalStatus or "",
            aadharNo=(aadharNo or "").replace(" ", ""),
            memberwork=memberwork or "",
            annualIncome=annualIncome or "",
            nomineeName=nomineeName or "",
            nomineeDob=nomineeDob or "",
            nomineeGender=nomineeGender or "",
            nomineeReligion=nomineeReligion or "",
            nomineeMaritalStatus=nomineeMaritalStatus or "",
            nomineeRelationship=nomineeRelationship or "",
            nomineeBusiness=nomineeBusiness or "",
            mobileNo=mobileNo or "",
            nomineeMobile=nomineeMobile or "",
            memberEmail=memberEmail or "",
            address=address or "",
            pincode=pincode or "",
        )


class LoanStatusUpdate(BaseModel):
    status: LoanStatusEnum


class LoanCreatedResponse(BaseModel):
    success: bool = True
    loanId: str
    id: str


class LoanSummary(BaseModel):
    id: str
    loan_id: str
    person_name: Optional[str] = None
    user_id: Optional[str] = None
    center_id: Optional[str] = None
    member_id: Optional[str] = None
    status: LoanStatusEnum
    created_at: Optional[datetime] = None


class LoanDetail(LoanSummary):
    fields: Dict[str, Any] = Field(default_factory=dict)
    documents: Dict[str, Optional[str]] = Field(default_factory=dict)
    document_urls: Dict[str, Optional[str]] = Field(default_factory=dict)


class LoanListResponse(BaseModel):
    data: List[LoanSummary]
    total: int
