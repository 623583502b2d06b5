"""Auth API: registration, login, current identity.

- POST /auth/register → create a user account (role=user)
- POST /auth/login → email/password → JWT bearer token
- GET /auth/me → the identity carried by the presented token

Register and login are open; /me goes through the auth gate.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import CurrentIdentity, get_current_user
from taskflow.db.engine import get_db
from taskflow.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserRead,
)
from taskflow.schemas.common import DataResponse
from taskflow.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def _auth_svc(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(body: RegisterRequest, svc: AuthService = Depends(_auth_svc)):
    """Create a new user account."""
    user = await svc.register(body.email, body.password)
    return RegisterResponse(data=UserRead.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_auth_svc)):
    """Login with email and password → JWT token."""
    result = await svc.login(body.email, body.password)
    return LoginResponse(token=result.token, data=UserRead.model_validate(result.user))


@router.get("/me", response_model=DataResponse[UserRead])
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    """Get the current identity (from the token, no database lookup)."""
    return DataResponse[UserRead](
        data=UserRead(id=identity.user_id, email=identity.email, role=identity.role)
    )
