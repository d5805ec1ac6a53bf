from fastapi import HTTPException, status
from app.database.models import User
from app.schemas import UserCreate
from app.core import hash_password, verify_password, create_access_token, is_valid_password
from app.helpers.response_builder import build_user_response, parse_object_id
from typing import Dict, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class AuthService:
    # Register a new user; emails are unique and stored lower-cased
    @staticmethod
    async def register_user(user_data: UserCreate) -> Dict:
        email = user_data.email.lower()
        existing_user = await User.find_one(User.email == email)

        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already exists"
            )

        if not is_valid_password(user_data.password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Password is too short"
            )

        try:
            hashed_password = hash_password(user_data.password)
        except ValueError:
            logger.warning("Password hashing failed")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid password format"
            )

        new_user = User(
            name=user_data.name.strip(),
            email=email,
            hashed_password=hashed_password,
            created_at=datetime.utcnow()
        )

        try:
            await new_user.insert()
            logger.debug("User saved with ID: %s", new_user.id)
        except Exception as e:
            logger.error("User save failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="User registration failed"
            )

        response = build_user_response(new_user)
        response["message"] = "User registered successfully"
        return response

    # Authenticate user and issue an access token
    @staticmethod
    async def login_user(email: str, password: str) -> Dict:
        email = (email or "").strip().lower()
        if not email or not password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email and password required"
            )

        user = await User.find_one(User.email == email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Failed login attempt for email: %s", email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        if user.blocked:
            logger.warning("Blocked user attempted login: %s", email)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account blocked"
            )

        try:
            access_token = create_access_token(str(user.id), is_admin=user.is_admin)
            logger.debug("Created access token for user: %s", user.id)
        except ValueError as e:
            logger.error("Token creation failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not create access token"
            )
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": build_user_response(user)
        }

    # Retrieve user information by id
    @staticmethod
    async def get_user_by_id(user_id: str) -> Optional[Dict]:
        object_id = parse_object_id(user_id)
        if object_id is None:
            return None
        user = await User.get(object_id)
        if not user:
            return None
        return build_user_response(user)

auth_service = AuthService()


def get_auth_service() -> AuthService:
    return auth_service
