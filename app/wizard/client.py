import re
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from app.wizard.context import WizardContext
from app.wizard.draft import LoanDraft
from app.wizard.errors import ApiError, ErrorCategory

logger = logging.getLogger(__name__)

LOAN_ID_PATTERN = re.compile(r"^LN-[0-9]+$")
PENDING_POLL_INTERVAL_SECONDS = 10.0


class LoanApiClient:
    """HTTP client for the loan intake API.

    Every failure is raised as an `ApiError` with a category the caller can
    surface directly. Submissions are never retried here; the server does not
    deduplicate them.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        if token:
            self.set_token(token)

    def set_token(self, token: str) -> None:
        self._client.headers["Authorization"] = f"Bearer {token}"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LoanApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request(
            "POST", "/api/auth/login", data={"username": email, "password": password}
        )
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise ApiError(ErrorCategory.FATAL, "Malformed login response")
        self.set_token(token)
        return data

    async def create_loan(self, draft: LoanDraft, context: WizardContext) -> str:
        user = context.require_user()
        context.require_selection()

        data = {name: value for name, value in draft.fields.to_wire().items() if value}
        data["userId"] = user.id
        data["centerId"] = context.center.id
        data["memberId"] = context.member.id

        files = [
            (slot, (image.filename, image.data, image.content_type))
            for slot, image in draft.documents.items()
            if image is not None
        ]
        logger.info(f"Submitting loan for member {context.member.id} with {len(files)} documents")

        body = await self._request("POST", "/api/loans", data=data, files=files)
        loan_id = body.get("loanId") if isinstance(body, dict) else None
        if not isinstance(loan_id, str) or not LOAN_ID_PATTERN.match(loan_id):
            raise ApiError(ErrorCategory.FATAL, "Malformed server response", detail=body)
        return loan_id

    async def update_loan_status(self, loan_id: str, status: str) -> Dict[str, Any]:
        return await self._request("PATCH", f"/api/loans/{loan_id}", json={"status": status})

    async def list_loans(self, search: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {k: v for k, v in {"search": search, "status": status}.items() if v}
        body = await self._request("GET", "/api/loans", params=params)
        return body.get("data", [])

    async def get_loan(self, loan_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/api/loans/{loan_id}")

    async def pending_counts(self) -> Dict[str, int]:
        return await self._request("GET", "/api/users/pending-counts")

    async def poll_pending_counts(
        self,
        on_update: Callable[[Dict[str, int]], None],
        interval: float = PENDING_POLL_INTERVAL_SECONDS,
    ) -> None:
        """Refresh pending loan counts every `interval` seconds until cancelled."""
        while True:
            try:
                on_update(await self.pending_counts())
            except ApiError as e:
                if e.category != ErrorCategory.TRANSIENT:
                    raise
                logger.warning(f"Pending count refresh failed, will retry: {e.message}")
            await asyncio.sleep(interval)

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiError(ErrorCategory.TRANSIENT, "Network error, please try again", detail=str(e)) from e

        if response.status_code >= 400:
            raise self._translate(response)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(ErrorCategory.FATAL, "Malformed server response", response.status_code) from e

    @staticmethod
    def _translate(response: httpx.Response) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            body = None

        error = body.get("error", {}) if isinstance(body, dict) else {}
        message = error.get("message") or response.reason_phrase or "Request failed"
        detail = error.get("details")
        status_code = response.status_code

        if status_code == 409:
            category = ErrorCategory.CONFLICT
        elif status_code in (400, 422):
            category = ErrorCategory.VALIDATION
        elif status_code == 429 or status_code >= 500:
            category = ErrorCategory.TRANSIENT
        else:
            category = ErrorCategory.FATAL
        return ApiError(category, str(message), status_code, detail)
