from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, List
import logging

from app.core.auth_dependencies import get_current_active_user
from app.schemas import MemberCreate, MemberResponse
from app.services.member_service import MemberService, get_member_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["Members"])


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    member_data: MemberCreate,
    current_user: Dict = Depends(get_current_active_user),
    service: MemberService = Depends(get_member_service)
):
    try:
        return await service.create_member(member_data, current_user["id"])
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating member: {e}")
        raise HTTPException(status_code=500, detail="Failed to create member")


# Members of one center, with a flag for the ones whose loan is already in
@router.get("/{center_id}", response_model=List[MemberResponse])
async def list_members(
    center_id: str,
    current_user: Dict = Depends(get_current_active_user),
    service: MemberService = Depends(get_member_service)
):
    try:
        return await service.list_members(center_id, current_user["id"], allow_any=bool(current_user.get("is_admin")))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing members for center {center_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch members")
