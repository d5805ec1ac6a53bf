from app.schemas.user_schemas import UserCreate, UserResponse, Token, UserBlockUpdate
from app.schemas.center_schema import CenterCreate, CenterResponse
from app.schemas.member_schema import MemberCreate, MemberResponse
