from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, List
import logging

from app.core.auth_dependencies import get_admin_user, get_current_active_user
from app.helpers.response_builder import build_loan_summary
from app.schemas import UserBlockUpdate, UserResponse
from app.schemas.loan_schema import LoanListResponse
from app.services.loan_service import LoanService, get_loan_service
from app.services.user_service import UserService, get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    admin_user: Dict = Depends(get_admin_user),
    service: UserService = Depends(get_user_service)
):
    return await service.list_users()

# Number of PENDING loans per field officer, polled by the admin dashboard
@router.get("/pending-counts", response_model=Dict[str, int])
async def pending_counts(
    admin_user: Dict = Depends(get_admin_user),
    loan_service: LoanService = Depends(get_loan_service)
):
    try:
        return await loan_service.pending_counts()
    except Exception as e:
        logger.error(f"Error computing pending counts: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch pending counts")

# Loans submitted by one user; visible to admins and to the user themselves
@router.get("/{user_id}/loans", response_model=LoanListResponse)
async def user_loans(
    user_id: str,
    current_user: Dict = Depends(get_current_active_user),
    loan_service: LoanService = Depends(get_loan_service)
):
    if not current_user.get("is_admin") and current_user["id"] != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to view these loans")

    loans = await loan_service.list_loans(user_id=user_id)
    data = [build_loan_summary(loan) for loan in loans]
    return {"data": data, "total": len(data)}

@router.patch("/{user_id}", response_model=UserResponse)
async def set_user_blocked(
    user_id: str,
    update: UserBlockUpdate,
    admin_user: Dict = Depends(get_admin_user),
    service: UserService = Depends(get_user_service)
):
    return await service.set_blocked(user_id, update.blocked, admin_user["id"])

@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    admin_user: Dict = Depends(get_admin_user),
    service: UserService = Depends(get_user_service)
):
    await service.delete_user(user_id, admin_user["id"])
    return {"success": True, "message": "User deleted"}
