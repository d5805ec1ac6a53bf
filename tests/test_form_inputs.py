import pytest

from app.utils.form_inputs import accept_input, capitalize_first, capitalize_words, format_aadhaar


@pytest.mark.parametrize("field, value, expected", [
    ("memberCibil", "7", "7"),
    ("memberCibil", "742", "742"),
    ("memberCibil", "7421", None),
    ("memberCibil", "7a", None),
    ("mobileNo", "98765", "98765"),
    ("mobileNo", "98765432101", None),
    ("pincode", "625001", "625001"),
    ("pincode", "62-001", None),
    ("aadharNo", "1234 5678 9012", "123456789012"),
    ("aadharNo", "1234 5678 90123", None),
])
def test_digit_fields_filter_edits(field, value, expected):
    assert accept_input(field, value) == expected


def test_empty_digit_field_is_accepted():
    assert accept_input("nomineeMobile", "") == ""


@pytest.mark.parametrize("value, expected", [
    ("12000", "12000"),
    ("12000.5", "12000.5"),
    ("12000.", "12000."),
    ("12,000", None),
    ("1.2.3", None),
])
def test_annual_income_allows_decimal(value, expected):
    assert accept_input("annualIncome", value) == expected


def test_name_fields_capitalise_first_letter():
    assert accept_input("personName", "lakshmi devi") == "Lakshmi devi"
    assert accept_input("nomineeBusiness", "tea stall") == "Tea stall"


def test_other_fields_pass_through():
    assert accept_input("address", "12 temple street") == "12 temple street"


def test_capitalize_helpers():
    assert capitalize_first("") == ""
    assert capitalize_first("madurai") == "Madurai"
    assert capitalize_words("  priya   RANI ") == "Priya Rani"


def test_format_aadhaar_groups_of_four():
    assert format_aadhaar("123456789012") == "1234 5678 9012"
    assert format_aadhaar("12345") == "1234 5"
    assert format_aadhaar("") == ""
