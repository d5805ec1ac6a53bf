import re
from typing import Optional

# Fields restricted to digits at the point of entry, with their fixed length
DIGIT_FIELDS = {
    "memberCibil": 3,
    "aadharNo": 12,
    "mobileNo": 10,
    "nomineeMobile": 10,
    "pincode": 6,
}

# Free-text fields that get their first letter capitalised as they are typed
CAPITALIZED_FIELDS = frozenset({"personName", "memberwork", "nomineeName", "nomineeBusiness"})

_INCOME_PATTERN = re.compile(r"[0-9]*(\.[0-9]*)?")


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:] if value else value


def capitalize_words(value: str) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in value.strip().split())


def format_aadhaar(value: str) -> str:
    """Group a stored Aadhaar number into 4-digit blocks for display."""
    digits = (value or "").replace(" ", "")
    return " ".join(digits[i:i + 4] for i in range(0, len(digits), 4))


def accept_input(field: str, value: str) -> Optional[str]:
    """Return the value to store for an edit, or None when the edit is rejected.

    Rejected edits leave the previous value in place.
    """
    if value is None:
        value = ""
    if field in DIGIT_FIELDS:
        raw = value.replace(" ", "") if field == "aadharNo" else value
        if re.fullmatch(rf"[0-9]{{0,{DIGIT_FIELDS[field]}}}", raw):
            return raw
        return None
    if field == "annualIncome":
        return value if _INCOME_PATTERN.fullmatch(value) else None
    if field in CAPITALIZED_FIELDS:
        return capitalize_first(value)
    return value
