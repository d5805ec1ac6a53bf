"""Per-step validation of a loan draft.

Every validator takes a read-only snapshot keyed by the form's wire names
(``memberCibil``, ``mobileNo``, ``memberAadhaarFront`` ...) and returns a
mapping of field name to message. An empty mapping means the step is valid.
The same functions run in the wizard before navigation and on the server
before anything is written to storage.
"""
import re
from enum import IntEnum
from typing import Any, Callable, Dict, Mapping, Optional

from app.schemas.document_schema import DOCUMENT_SLOT_NAMES
from app.schemas.loan_schema import (
    MemberGenderEnum,
    ReligionEnum,
    MemberMaritalStatusEnum,
)

Errors = Dict[str, str]


class FormStep(IntEnum):
    IDENTITY = 1
    NOMINEE = 2
    CONTACT = 3
    DOCUMENTS = 4


MEMBER_GENDER_OPTIONS = frozenset(e.value for e in MemberGenderEnum)
RELIGION_OPTIONS = frozenset(e.value for e in ReligionEnum)
MEMBER_MARITAL_STATUS_OPTIONS = frozenset(e.value for e in MemberMaritalStatusEnum)

MEMBER_CHOICES = (
    ("gender", MEMBER_GENDER_OPTIONS, "Gender"),
    ("religion", RELIGION_OPTIONS, "Religion"),
    ("maritalStatus", MEMBER_MARITAL_STATUS_OPTIONS, "Marital status"),
)

SAME_MOBILE_MESSAGE = "Nominee mobile cannot be same as member mobile"


def _value(snapshot: Mapping[str, Any], field: str) -> str:
    raw = snapshot.get(field)
    if raw is None:
        return ""
    return str(raw).strip()


def _digits(value: str, length: int) -> bool:
    return re.fullmatch(rf"[0-9]{{{length}}}", value) is not None


def _choice_error(value: str, options, label: str) -> Optional[str]:
    if not value:
        return f"{label} required"
    if value not in options:
        return f"Select a valid {label.lower()}"
    return None


def validate_identity(snapshot: Mapping[str, Any]) -> Errors:
    e: Errors = {}
    if not _digits(_value(snapshot, "memberCibil"), 3):
        e["memberCibil"] = "CIBIL required (3 digits)"
    if not _value(snapshot, "personName"):
        e["personName"] = "Name required"
    if not _value(snapshot, "dateofbirth"):
        e["dateofbirth"] = "DOB required"
    for field, options, label in MEMBER_CHOICES:
        message = _choice_error(_value(snapshot, field), options, label)
        if message:
            e[field] = message
    if not _digits(_value(snapshot, "aadharNo").replace(" ", ""), 12):
        e["aadharNo"] = "Valid Aadhaar required"
    if not _value(snapshot, "memberwork"):
        e["memberwork"] = "Work required"
    if not _value(snapshot, "annualIncome"):
        e["annualIncome"] = "Income required"
    return e


NOMINEE_REQUIRED = (
    ("nomineeName", "Nominee name required"),
    ("nomineeDob", "Nominee DOB required"),
    ("nomineeGender", "Nominee gender required"),
    ("nomineeReligion", "Nominee religion required"),
    ("nomineeMaritalStatus", "Nominee marital status required"),
    ("nomineeRelationship", "Nominee relationship required"),
    ("nomineeBusiness", "Nominee business required"),
)


def validate_nominee(snapshot: Mapping[str, Any]) -> Errors:
    return {
        field: message
        for field, message in NOMINEE_REQUIRED
        if not _value(snapshot, field)
    }


def validate_contact(snapshot: Mapping[str, Any]) -> Errors:
    e: Errors = {}
    mobile = _value(snapshot, "mobileNo")
    nominee_mobile = _value(snapshot, "nomineeMobile")

    if not _digits(mobile, 10):
        e["mobileNo"] = "Valid mobile required"
    if not _digits(nominee_mobile, 10):
        e["nomineeMobile"] = "Valid nominee mobile required"
    elif nominee_mobile == mobile:
        e["nomineeMobile"] = SAME_MOBILE_MESSAGE
    if not _value(snapshot, "address"):
        e["address"] = "Address required"
    if not _digits(_value(snapshot, "pincode"), 6):
        e["pincode"] = "Valid pincode required"
    # memberEmail is optional and not checked here
    return e


def validate_documents(snapshot: Mapping[str, Any]) -> Errors:
    return {slot: "Required" for slot in DOCUMENT_SLOT_NAMES if not snapshot.get(slot)}


STEP_VALIDATORS: Dict[FormStep, Callable[[Mapping[str, Any]], Errors]] = {
    FormStep.IDENTITY: validate_identity,
    FormStep.NOMINEE: validate_nominee,
    FormStep.CONTACT: validate_contact,
    FormStep.DOCUMENTS: validate_documents,
}


def validate_step(step: FormStep, snapshot: Mapping[str, Any]) -> Errors:
    return STEP_VALIDATORS[FormStep(step)](snapshot)


def validate_all(snapshot: Mapping[str, Any]) -> Errors:
    errors: Errors = {}
    for step in FormStep:
        errors.update(validate_step(step, snapshot))
    return errors


def missing_documents(snapshot: Mapping[str, Any]) -> list:
    """Slot names without a document, in contract order."""
    return [slot for slot in DOCUMENT_SLOT_NAMES if not snapshot.get(slot)]
