import pytest

from app.schemas.document_schema import DOCUMENT_SLOT_NAMES
from app.utils.step_validators import (
    FormStep,
    SAME_MOBILE_MESSAGE,
    missing_documents,
    validate_all,
    validate_contact,
    validate_documents,
    validate_identity,
    validate_nominee,
    validate_step,
)


def test_valid_snapshot_passes_every_step(valid_snapshot):
    for step in FormStep:
        assert validate_step(step, valid_snapshot) == {}
    assert validate_all(valid_snapshot) == {}


def test_short_cibil_fails_only_that_field(valid_snapshot):
    valid_snapshot["memberCibil"] = "12"

    errors = validate_identity(valid_snapshot)

    assert errors == {"memberCibil": "CIBIL required (3 digits)"}


def test_empty_identity_reports_every_field():
    errors = validate_identity({})
    assert set(errors) == {
        "memberCibil", "personName", "dateofbirth", "gender", "religion",
        "maritalStatus", "aadharNo", "memberwork", "annualIncome",
    }


@pytest.mark.parametrize("value", ["Single", "Other", "male", ""])
def test_member_choices_are_restricted(valid_snapshot, value):
    valid_snapshot["gender"] = value
    valid_snapshot["maritalStatus"] = value
    errors = validate_identity(valid_snapshot)
    assert set(errors) == {"gender", "maritalStatus"}


def test_unknown_choice_gets_its_own_message(valid_snapshot):
    valid_snapshot["gender"] = "Male"
    valid_snapshot["religion"] = "Jain"
    valid_snapshot["maritalStatus"] = ""

    errors = validate_identity(valid_snapshot)

    assert errors == {
        "gender": "Select a valid gender",
        "religion": "Select a valid religion",
        "maritalStatus": "Marital status required",
    }


@pytest.mark.parametrize("aadhaar, ok", [
    ("123456789012", True),
    ("1234 5678 9012", True),
    ("12345678901", False),
    ("12345678901a", False),
])
def test_aadhaar_must_be_twelve_digits(valid_snapshot, aadhaar, ok):
    valid_snapshot["aadharNo"] = aadhaar
    assert ("aadharNo" not in validate_identity(valid_snapshot)) is ok


def test_nominee_step_only_checks_presence(valid_snapshot):
    valid_snapshot["nomineeBusiness"] = "   "
    valid_snapshot["nomineeDob"] = ""
    assert validate_nominee(valid_snapshot) == {
        "nomineeDob": "Nominee DOB required",
        "nomineeBusiness": "Nominee business required",
    }


def test_same_mobile_numbers_rejected(valid_snapshot):
    valid_snapshot["mobileNo"] = "9876543210"
    valid_snapshot["nomineeMobile"] = "9876543210"

    errors = validate_contact(valid_snapshot)

    assert errors == {"nomineeMobile": SAME_MOBILE_MESSAGE}


def test_invalid_nominee_mobile_reported_before_equality(valid_snapshot):
    valid_snapshot["mobileNo"] = "98765"
    valid_snapshot["nomineeMobile"] = "98765"
    errors = validate_contact(valid_snapshot)
    assert errors["mobileNo"] == "Valid mobile required"
    assert errors["nomineeMobile"] == "Valid nominee mobile required"


def test_member_email_is_optional(valid_snapshot):
    valid_snapshot["memberEmail"] = ""
    assert validate_contact(valid_snapshot) == {}


def test_bad_pincode(valid_snapshot):
    valid_snapshot["pincode"] = "62500"
    assert validate_contact(valid_snapshot) == {"pincode": "Valid pincode required"}


def test_missing_documents_in_slot_order(valid_snapshot):
    valid_snapshot["signature"] = None
    valid_snapshot["memberAadhaarBack"] = None

    assert validate_documents(valid_snapshot) == {
        "memberAadhaarBack": "Required",
        "signature": "Required",
    }
    assert missing_documents(valid_snapshot) == ["memberAadhaarBack", "signature"]


def test_no_documents_lists_all_slots(valid_fields):
    assert missing_documents(valid_fields) == list(DOCUMENT_SLOT_NAMES)
