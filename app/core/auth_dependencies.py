from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from app.core.security import decode_token
from app.services.auth_service import auth_service
from typing import Dict
import logging

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

# Extracts and validates the bearer token to retrieve the current user
async def get_current_user(token: str = Depends(oauth2_scheme)) -> Dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if payload is None:
        logger.debug("Token payload is None after decoding.")
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        logger.debug("No 'sub' field in token payload.")
        raise credentials_exception

    user = await auth_service.get_user_by_id(user_id)
    if user is None:
        raise credentials_exception

    return user

# Rejects users that an admin has blocked since the token was issued
async def get_current_active_user(current_user: Dict = Depends(get_current_user)) -> Dict:
    if current_user.get("blocked"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account blocked")
    return current_user

# Validates that the current user has admin privileges
async def get_admin_user(current_user: Dict = Depends(get_current_active_user)) -> Dict:
    if not current_user.get("is_admin"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user
