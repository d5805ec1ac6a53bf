from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from typing import Dict

from app.services.auth_service import AuthService, get_auth_service
from app.schemas import UserCreate, UserResponse, Token
from app.core.auth_dependencies import get_current_active_user
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

# Registers a new field officer account; admins are promoted in the database
@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup_user(
    user_data: UserCreate,
    service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    try:
        created_user = await service.register_user(user_data)
        return UserResponse(**created_user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during signup: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during registration"
        )

# Authenticates user credentials and returns an access token with the user profile
@router.post("/login", response_model=Token, status_code=status.HTTP_200_OK)
async def login_user(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service)
) -> Token:
    try:
        token_data = await service.login_user(form_data.username, form_data.password)
        return Token(
            access_token=token_data["access_token"],
            token_type=token_data["token_type"],
            user=UserResponse(**token_data["user"])
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during login"
        )

# Retrieves the authenticated user's profile information
@router.get("/me", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def get_current_user_info(current_user: Dict = Depends(get_current_active_user)) -> UserResponse:
    return UserResponse(**current_user)
