import asyncio

import httpx
import pytest

from app.wizard import CenterRef, LoanApiClient, LoanDraft, MemberRef, SessionUser, WizardContext
from app.wizard.crop import CroppedImage
from app.wizard.errors import ApiError, ErrorCategory

CONTEXT = WizardContext(
    user=SessionUser(id="u1"),
    center=CenterRef(id="c1"),
    member=MemberRef(id="m1", name="Lakshmi Devi", cibil="742"),
)


def _client(handler, token="tok"):
    return LoanApiClient("http://testserver", token=token, transport=httpx.MockTransport(handler))


def _draft():
    draft = LoanDraft.for_member(CONTEXT.member)
    draft.set("mobileNo", "9876543210")
    draft.set_document("signature", CroppedImage(data=b"\xff\xd8\xffjpeg", width=10, height=10))
    return draft


@pytest.mark.asyncio
async def test_create_loan_sends_multipart():
    seen = {}

    def handler(request: httpx.Request):
        seen["auth"] = request.headers["authorization"]
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(201, json={"success": True, "loanId": "LN-1718000000000000001", "id": "abc"})

    async with _client(handler) as client:
        loan_id = await client.create_loan(_draft(), CONTEXT)

    assert loan_id == "LN-1718000000000000001"
    assert seen["auth"] == "Bearer tok"
    assert seen["content_type"].startswith("multipart/form-data")
    body = seen["body"]
    assert b'name="signature"; filename="cropped.jpg"' in body
    assert b'name="memberId"' in body and b"m1" in body
    assert b'name="mobileNo"' in body
    # Empty fields are not sent
    assert b'name="religion"' not in body


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code, category", [
    (409, ErrorCategory.CONFLICT),
    (400, ErrorCategory.VALIDATION),
    (422, ErrorCategory.VALIDATION),
    (429, ErrorCategory.TRANSIENT),
    (500, ErrorCategory.TRANSIENT),
    (503, ErrorCategory.TRANSIENT),
    (401, ErrorCategory.FATAL),
    (403, ErrorCategory.FATAL),
])
async def test_error_categories(status_code, category):
    def handler(request):
        return httpx.Response(status_code, json={"error": {"message": "nope", "details": {"errors": {"x": "y"}}}})

    async with _client(handler) as client:
        with pytest.raises(ApiError) as exc:
            await client.create_loan(_draft(), CONTEXT)

    assert exc.value.category == category
    assert exc.value.status_code == status_code
    assert exc.value.message == "nope"
    assert exc.value.detail == {"errors": {"x": "y"}}


@pytest.mark.asyncio
async def test_network_error_is_transient():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(ApiError) as exc:
            await client.create_loan(_draft(), CONTEXT)

    assert exc.value.category == ErrorCategory.TRANSIENT


@pytest.mark.asyncio
@pytest.mark.parametrize("error_class", [httpx.TooManyRedirects, httpx.DecodingError])
async def test_other_httpx_errors_are_translated(error_class):
    def handler(request):
        raise error_class("bad response", request=request)

    async with _client(handler) as client:
        with pytest.raises(ApiError) as exc:
            await client.create_loan(_draft(), CONTEXT)

    assert exc.value.category == ErrorCategory.TRANSIENT
    assert "bad response" in exc.value.detail


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(201, json={"success": True}),
    httpx.Response(201, json={"loanId": "12345"}),
    httpx.Response(201, text="<html>ok</html>"),
])
async def test_malformed_success_is_fatal(response):
    async with _client(lambda request: response) as client:
        with pytest.raises(ApiError) as exc:
            await client.create_loan(_draft(), CONTEXT)

    assert exc.value.category == ErrorCategory.FATAL


@pytest.mark.asyncio
async def test_login_stores_token():
    def handler(request):
        if request.url.path == "/api/auth/login":
            assert b"username=officer%40example.com" in request.content
            return httpx.Response(200, json={"access_token": "fresh", "token_type": "bearer"})
        assert request.headers["authorization"] == "Bearer fresh"
        return httpx.Response(200, json={"data": [], "total": 0})

    async with _client(handler, token=None) as client:
        await client.login("officer@example.com", "secret1")
        assert await client.list_loans(status="PENDING") == []
        assert client._client.headers["Authorization"] == "Bearer fresh"


@pytest.mark.asyncio
async def test_update_loan_status_patches():
    def handler(request):
        assert request.method == "PATCH"
        assert request.url.path == "/api/loans/abc"
        return httpx.Response(200, json={"id": "abc", "status": "APPROVED"})

    async with _client(handler) as client:
        result = await client.update_loan_status("abc", "APPROVED")

    assert result["status"] == "APPROVED"


@pytest.mark.asyncio
async def test_polling_survives_transient_errors():
    responses = [httpx.Response(503), httpx.Response(200, json={"u1": 2})]
    updates = []

    def handler(request):
        return responses.pop(0) if responses else httpx.Response(200, json={"u1": 3})

    async with _client(handler) as client:
        task = asyncio.create_task(client.poll_pending_counts(updates.append, interval=0))
        while len(updates) < 2:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert updates[:2] == [{"u1": 2}, {"u1": 3}]


@pytest.mark.asyncio
async def test_polling_stops_on_fatal_error():
    async with _client(lambda request: httpx.Response(403, json={"error": {"message": "Admin access required"}})) as client:
        with pytest.raises(ApiError) as exc:
            await client.poll_pending_counts(lambda counts: None, interval=0)

    assert exc.value.category == ErrorCategory.FATAL
