from typing import Any, Dict, Optional

from beanie.odm.fields import PydanticObjectId
from bson.errors import InvalidId

from app.core.supabase_client import public_object_url
from app.schemas.document_schema import DOCUMENT_SLOTS
from app.schemas.loan_schema import FORM_FIELD_NAMES


def parse_object_id(value: str) -> Optional[PydanticObjectId]:
    """Parse a path/body id; None when it is not a valid ObjectId."""
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError, ValueError):
        return None


def build_user_response(user) -> Dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "is_admin": user.is_admin,
        "blocked": user.blocked,
        "created_at": user.created_at,
    }


def build_center_response(center) -> Dict[str, Any]:
    return {
        "id": str(center.id),
        "name": center.name,
        "user_id": center.user_id,
        "created_at": center.created_at,
    }


def build_member_response(member, loan_submitted: bool = False) -> Dict[str, Any]:
    return {
        "id": str(member.id),
        "name": member.name,
        "center_id": member.center_id,
        "cibil": member.cibil,
        "date_of_birth": member.date_of_birth,
        "gender": member.gender,
        "loan_submitted": loan_submitted,
        "created_at": member.created_at,
    }


def build_loan_summary(loan) -> Dict[str, Any]:
    return {
        "id": str(loan.id),
        "loan_id": loan.loan_id,
        "person_name": loan.person_name,
        "user_id": loan.user_id,
        "center_id": loan.center_id,
        "member_id": loan.member_id,
        "status": loan.status,
        "created_at": loan.created_at,
    }


def build_loan_detail(loan) -> Dict[str, Any]:
    response = build_loan_summary(loan)
    # Scalar fields are reported under their wire names, same as the form
    response["fields"] = {wire: getattr(loan, attr) for wire, attr in FORM_FIELD_NAMES.items()}
    response["documents"] = {slot.wire_name: getattr(loan, slot.field_name) for slot in DOCUMENT_SLOTS}
    response["document_urls"] = {
        slot.wire_name: public_object_url(getattr(loan, slot.field_name)) for slot in DOCUMENT_SLOTS
    }
    return response
