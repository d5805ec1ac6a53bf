import logging
from datetime import datetime
from typing import Dict, List

from fastapi import HTTPException, status

from app.database.models import User
from app.helpers.response_builder import build_user_response, parse_object_id

logger = logging.getLogger(__name__)


class UserService:

    async def list_users(self) -> List[Dict]:
        users = await User.find_all().sort(-User.created_at).to_list()
        return [build_user_response(u) for u in users]

    async def _get_user(self, user_id: str) -> User:
        object_id = parse_object_id(user_id)
        user = await User.get(object_id) if object_id else None
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    # Blocked users keep their data but can no longer log in or call the API
    async def set_blocked(self, user_id: str, blocked: bool, acting_user_id: str) -> Dict:
        if user_id == acting_user_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot block yourself")
        user = await self._get_user(user_id)
        user.blocked = blocked
        user.updated_at = datetime.utcnow()
        await user.save()
        logger.info(f"User {user_id} {'blocked' if blocked else 'unblocked'} by {acting_user_id}")
        return build_user_response(user)

    async def delete_user(self, user_id: str, acting_user_id: str) -> None:
        if user_id == acting_user_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete yourself")
        user = await self._get_user(user_id)
        await user.delete()
        logger.info(f"User {user_id} deleted by {acting_user_id}")


user_service = UserService()


def get_user_service() -> UserService:
    return user_service
