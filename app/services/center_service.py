import logging
import re
from datetime import datetime
from typing import Dict, List

from beanie.operators import RegEx
from fastapi import HTTPException, status

from app.database.models import Center
from app.helpers.response_builder import build_center_response, parse_object_id
from app.schemas import CenterCreate
from app.utils.form_inputs import capitalize_first

logger = logging.getLogger(__name__)


def _exact_name(name: str):
    return f"^{re.escape(name)}$"


class CenterService:

    # Creates a center for the user; names are unique per user, ignoring case
    async def create_center(self, center_data: CenterCreate, user_id: str) -> Dict:
        name = capitalize_first(center_data.name.strip())
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Center name required")

        existing = await Center.find_one(
            Center.user_id == user_id,
            RegEx(Center.name, _exact_name(name), "i"),
        )
        if existing:
            logger.info(f"Duplicate center '{name}' for user {user_id}")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Center already exists")

        center = Center(name=name, user_id=user_id, created_at=datetime.utcnow())
        await center.insert()
        logger.info(f"Created center {center.id} for user {user_id}")
        return build_center_response(center)

    # Admins see every center, everyone else only their own
    async def list_centers(self, user_id: str, include_all: bool = False) -> List[Dict]:
        query = Center.find_all() if include_all else Center.find(Center.user_id == user_id)
        centers = await query.sort(+Center.name).to_list()
        return [build_center_response(c) for c in centers]

    # Loads a center and checks that it belongs to the user, unless allow_any is set
    async def get_owned_center(self, center_id: str, user_id: str, allow_any: bool = False) -> Center:
        object_id = parse_object_id(center_id)
        center = await Center.get(object_id) if object_id else None
        if not center or (not allow_any and center.user_id != user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Center not found")
        return center


center_service = CenterService()


def get_center_service() -> CenterService:
    return center_service
