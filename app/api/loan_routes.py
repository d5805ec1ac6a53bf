from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi import status
from typing import Dict, Optional
import logging

from app.core.auth_dependencies import get_current_active_user, get_admin_user
from app.helpers.response_builder import build_loan_detail, build_loan_summary
from app.schemas.document_schema import DOCUMENT_SLOTS, LoanDocumentUploadRequest
from app.schemas.loan_schema import (
    LoanCreatedResponse,
    LoanDetail,
    LoanListResponse,
    LoanStatusEnum,
    LoanStatusUpdate,
    LoanSummary,
    LoanSubmissionForm,
)
from app.services.document_service import DocumentService, get_document_service
from app.services.loan_service import LoanService, get_loan_service
from app.services.member_service import MemberService, get_member_service
from app.workers.loan_submission_worker import process_loan_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/loans", tags=["Loans"])

# Receives the wizard's multipart submission: form fields plus up to nine document images
@router.post("", response_model=LoanCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_loan(
    form: LoanSubmissionForm = Depends(),
    documents: LoanDocumentUploadRequest = Depends(),
    current_user: Dict = Depends(get_current_active_user),
    service: LoanService = Depends(get_loan_service),
    document_service: DocumentService = Depends(get_document_service),
    member_service: MemberService = Depends(get_member_service)
):
    try:
        return await process_loan_submission(
            form,
            documents.to_dict(),
            current_user,
            service,
            document_service,
            member_service
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error in loan creation: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while submitting the loan"
        )

# Lists all loans for review, newest first
@router.get("", response_model=LoanListResponse)
async def list_loans(
    search: Optional[str] = Query(None, description="Matches applicant name, loan id or mobile"),
    status_filter: Optional[LoanStatusEnum] = Query(None, alias="status"),
    admin_user: Dict = Depends(get_admin_user),
    service: LoanService = Depends(get_loan_service)
):
    try:
        loans = await service.list_loans(search=search, status_filter=status_filter)
        data = [build_loan_summary(loan) for loan in loans]
        return {"data": data, "total": len(data)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing loans: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch loans")

@router.get("/{loan_id}", response_model=LoanDetail)
async def get_loan(
    loan_id: str,
    admin_user: Dict = Depends(get_admin_user),
    service: LoanService = Depends(get_loan_service)
):
    loan = await service.get_loan(loan_id)
    return build_loan_detail(loan)

# Moves a loan along PENDING -> APPROVED/REJECTED -> CREDITED
@router.patch("/{loan_id}", response_model=LoanSummary)
async def update_loan_status(
    loan_id: str,
    update: LoanStatusUpdate,
    admin_user: Dict = Depends(get_admin_user),
    service: LoanService = Depends(get_loan_service)
):
    try:
        loan = await service.update_status(loan_id, update.status)
        logger.info(f"Admin {admin_user['id']} set loan {loan.loan_id} to {update.status.value}")
        return build_loan_summary(loan)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating status of loan {loan_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update loan status")

@router.delete("/{loan_id}", status_code=status.HTTP_200_OK)
async def delete_loan(
    loan_id: str,
    admin_user: Dict = Depends(get_admin_user),
    service: LoanService = Depends(get_loan_service),
    document_service: DocumentService = Depends(get_document_service)
):
    try:
        loan = await service.delete_loan(loan_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting loan {loan_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete loan")

    await document_service.cleanup_objects(getattr(loan, slot.field_name) for slot in DOCUMENT_SLOTS)
    return {"success": True, "message": f"Loan {loan.loan_id} deleted"}
