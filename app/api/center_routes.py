from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, List
import logging

from app.core.auth_dependencies import get_current_active_user
from app.schemas import CenterCreate, CenterResponse
from app.services.center_service import CenterService, get_center_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/centers", tags=["Centers"])


@router.post("", response_model=CenterResponse, status_code=status.HTTP_201_CREATED)
async def create_center(
    center_data: CenterCreate,
    current_user: Dict = Depends(get_current_active_user),
    service: CenterService = Depends(get_center_service)
):
    try:
        return await service.create_center(center_data, current_user["id"])
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating center: {e}")
        raise HTTPException(status_code=500, detail="Failed to create center")


# Lists the centers owned by the current user, or all centers for an admin
@router.get("", response_model=List[CenterResponse])
async def list_centers(
    current_user: Dict = Depends(get_current_active_user),
    service: CenterService = Depends(get_center_service)
):
    try:
        return await service.list_centers(current_user["id"], include_all=bool(current_user.get("is_admin")))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing centers: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch centers")
