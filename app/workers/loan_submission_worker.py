import logging
import secrets
import time
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, UploadFile

from app.schemas.document_schema import DOCUMENT_SLOTS
from app.schemas.loan_schema import LoanStatusEnum, LoanSubmissionForm
from app.utils.step_validators import missing_documents, validate_all

logger = logging.getLogger(__name__)

RANDOM_SUFFIX_DIGITS = 6


def generate_loan_id(now: Optional[float] = None, rng=secrets) -> str:
    """Sequence id of the form LN-<13 digit ms timestamp><6 random digits>."""
    millis = int((time.time() if now is None else now) * 1000)
    suffix = rng.randbelow(10 ** RANDOM_SUFFIX_DIGITS)
    return f"LN-{millis:013d}{suffix:0{RANDOM_SUFFIX_DIGITS}d}"


def build_loan_record(
    form: LoanSubmissionForm,
    loan_id: str,
    user_id: str,
    keys: Dict[str, str],
) -> Dict[str, Any]:
    """Flat record for the store: every scalar, every slot key (None when absent)."""
    record: Dict[str, Any] = form.fields.model_dump()
    record.update({
        "loan_id": loan_id,
        "user_id": user_id,
        "center_id": form.center_id,
        "member_id": form.member_id,
        "status": LoanStatusEnum.pending,
    })
    for slot in DOCUMENT_SLOTS:
        record[slot.field_name] = keys.get(slot.wire_name)
    return record


def _snapshot(form: LoanSubmissionForm, document_files: Dict[str, Optional[UploadFile]]) -> Dict[str, Any]:
    snapshot: Dict[str, Any] = form.fields.to_wire()
    for slot in DOCUMENT_SLOTS:
        snapshot[slot.wire_name] = document_files.get(slot.wire_name) is not None
    return snapshot


async def process_loan_submission(
    form: LoanSubmissionForm,
    document_files: Dict[str, Optional[UploadFile]],
    current_user: Dict,
    loan_service,
    document_service,
    member_service,
    id_factory=generate_loan_id,
) -> Dict[str, Any]:
    """
    Runs the upload pipeline for one multipart loan submission.

    Checks that the member belongs to one of the user's centers, validates the
    whole form, writes each present document to storage under a fresh
    sequence id and inserts one flat record. Objects written before a failure
    are removed on a best-effort basis.
    """
    user_id = current_user["id"]
    logger.info(f"Starting loan submission for user: {current_user.get('email')}")

    if form.user_id and form.user_id != user_id:
        logger.warning(f"Form userId {form.user_id} does not match token user {user_id}, using token user")

    if not form.center_id or not form.member_id:
        raise HTTPException(status_code=400, detail="Please select a center and member first.")

    await member_service.get_center_member(
        form.center_id, form.member_id, user_id, allow_any=bool(current_user.get("is_admin"))
    )

    snapshot = _snapshot(form, document_files)
    errors = validate_all(snapshot)
    if errors:
        missing = missing_documents(snapshot)
        logger.info(f"Loan submission rejected, invalid fields: {', '.join(errors)}")
        raise HTTPException(
            status_code=422,
            detail={
                "message": "Loan application is incomplete",
                "errors": errors,
                "missing_documents": missing,
            },
        )

    prepared: List[tuple] = []
    for slot in DOCUMENT_SLOTS:
        file = document_files.get(slot.wire_name)
        if file is None:
            continue
        contents, content_type = await document_service.validate_file(slot.wire_name, file)
        prepared.append((slot.wire_name, contents, content_type))

    loan_id = id_factory()
    keys: Dict[str, str] = {}
    try:
        for wire_name, contents, content_type in prepared:
            data, content_type = await document_service.prepare(contents, content_type)
            key = document_service.build_object_key(loan_id, wire_name, content_type)
            keys[wire_name] = await document_service.put_object(key, data, content_type)

        loan = await loan_service.create_loan(build_loan_record(form, loan_id, user_id, keys))
    except Exception as e:
        logger.error(f"Loan submission {loan_id} failed after {len(keys)} uploads: {e}")
        await document_service.cleanup_objects(keys.values())
        if isinstance(e, HTTPException) and e.status_code >= 500:
            raise
        raise HTTPException(status_code=500, detail=f"Loan submission failed: {e}")

    logger.info(f"Loan {loan_id} created with {len(keys)} documents")
    return {"success": True, "loanId": loan.loan_id, "id": str(loan.id)}
