import io
import re

import pytest
from fastapi import HTTPException, UploadFile
from PIL import Image
from starlette.datastructures import Headers

from app.core.supabase_client import public_object_url
from app.services.document_service import DocumentService
from app.utils.image_processor import normalize_image, sniff_content_type


class RecordingBucket:
    def __init__(self):
        self.uploads = []

    def upload(self, key, data, options):
        self.uploads.append((key, data, options))
        return {"Key": key}

    def remove(self, keys):
        raise RuntimeError("storage offline")


class FakeSupabase:
    def __init__(self, bucket):
        self.storage = self
        self._bucket = bucket
        self.requested = []

    def from_(self, name):
        self.requested.append(name)
        return self._bucket


def test_object_key_layout():
    service = DocumentService(client=object(), normalize=False)
    key = service.build_object_key("LN-1718000000000000001", "panCard", "image/png")
    assert re.fullmatch(r"loans/LN-1718000000000000001/panCard-[0-9a-f]{32}\.png", key)


@pytest.mark.asyncio
async def test_put_object_upserts_into_bucket():
    bucket = RecordingBucket()
    client = FakeSupabase(bucket)
    service = DocumentService(client=client, bucket="loan-documents", normalize=False)

    key = await service.put_object("loans/LN-1/signature-abc.jpg", b"jpeg", "image/jpeg")

    assert key == "loans/LN-1/signature-abc.jpg"
    assert client.requested == ["loan-documents"]
    assert bucket.uploads == [
        ("loans/LN-1/signature-abc.jpg", b"jpeg", {"content-type": "image/jpeg", "upsert": "true"})
    ]


@pytest.mark.asyncio
async def test_cleanup_swallows_storage_errors():
    service = DocumentService(client=FakeSupabase(RecordingBucket()), normalize=False)
    await service.cleanup_objects(["loans/LN-1/a.jpg", None])


@pytest.mark.asyncio
async def test_empty_part_rejected():
    service = DocumentService(client=object(), normalize=False)
    empty = UploadFile(file=io.BytesIO(b""), filename="x.jpg", headers=Headers({"content-type": "image/jpeg"}))
    with pytest.raises(HTTPException) as exc:
        await service.validate_file("panCard", empty)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_image_jpg_is_stored_as_jpeg(jpeg_bytes):
    service = DocumentService(client=object(), normalize=False)
    part = UploadFile(file=io.BytesIO(jpeg_bytes), filename="x.jpg", headers=Headers({"content-type": "image/jpg"}))
    _, content_type = await service.validate_file("panCard", part)
    assert content_type == "image/jpeg"


@pytest.mark.asyncio
async def test_prepare_reencodes_when_enabled(png_bytes):
    service = DocumentService(client=object(), normalize=True)
    data, content_type = await service.prepare(png_bytes, "image/png")
    assert content_type == "image/png"
    with Image.open(io.BytesIO(data)) as image:
        assert image.format == "PNG"
        assert image.size == (40, 30)


@pytest.mark.asyncio
async def test_prepare_passes_through_when_disabled(png_bytes):
    service = DocumentService(client=object(), normalize=False)
    assert await service.prepare(png_bytes, "image/png") == (png_bytes, "image/png")


def test_normalize_turns_webp_into_jpeg():
    out = io.BytesIO()
    Image.new("RGBA", (20, 10), (10, 20, 30, 255)).save(out, format="WEBP")

    data, content_type = normalize_image(out.getvalue(), "image/webp")

    assert content_type == "image/jpeg"
    assert data[:3] == b"\xff\xd8\xff"


@pytest.mark.parametrize("contents, declared, filename, expected", [
    (b"\xff\xd8\xff\xe0rest", "application/octet-stream", "", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\nrest", "", "", "image/png"),
    (b"RIFF\x00\x00\x00\x00WEBP", "text/plain", "", "image/webp"),
    (b"????", "application/octet-stream", "scan.JPEG", "image/jpeg"),
    (b"????", "application/octet-stream", "scan.pdf", "application/octet-stream"),
    (b"????", "image/png", "", "image/png"),
])
def test_sniff_content_type(contents, declared, filename, expected):
    assert sniff_content_type(contents, declared, filename) == expected


def test_public_url_for_key():
    url = public_object_url("loans/LN-1/panCard-abc.jpg")
    assert url.endswith("/storage/v1/object/public/loan-documents/loans/LN-1/panCard-abc.jpg")
    assert public_object_url(None) is None
