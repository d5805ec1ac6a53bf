import io
import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-pytest")
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_BUCKET", "loan-documents")

import pytest
from PIL import Image

from app.schemas.document_schema import DOCUMENT_SLOT_NAMES


VALID_FIELDS = {
    "memberCibil": "742",
    "personName": "Lakshmi Devi",
    "dateofbirth": "1988-04-12",
    "gender": "Female",
    "religion": "Hindu",
    "maritalStatus": "Married",
    "aadharNo": "123456789012",
    "memberwork": "Tailoring",
    "annualIncome": "120000",
    "nomineeName": "Ravi Kumar",
    "nomineeDob": "1985-01-30",
    "nomineeGender": "Male",
    "nomineeReligion": "Hindu",
    "nomineeMaritalStatus": "Married",
    "nomineeRelationship": "Spouse",
    "nomineeBusiness": "Farming",
    "mobileNo": "9876543210",
    "nomineeMobile": "9123456780",
    "memberEmail": "",
    "address": "12 Temple Street, Madurai",
    "pincode": "625001",
}


def make_jpeg(width: int = 400, height: int = 300, color=(200, 120, 40)) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", (width, height), color).save(out, format="JPEG")
    return out.getvalue()


def make_png(width: int = 40, height: int = 30) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", (width, height), (0, 128, 255)).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def valid_fields():
    return dict(VALID_FIELDS)


@pytest.fixture
def valid_snapshot(valid_fields):
    snapshot = dict(valid_fields)
    snapshot.update({slot: True for slot in DOCUMENT_SLOT_NAMES})
    return snapshot


@pytest.fixture
def jpeg_bytes():
    return make_jpeg()


@pytest.fixture
def jpeg_factory():
    return make_jpeg


@pytest.fixture
def png_bytes():
    return make_png()
