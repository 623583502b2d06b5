"""Auth service: registration, login and admin seeding.

Learn: two properties hold here:
- Email uniqueness: checked before insert, and a racing duplicate that
  slips past the check still fails on the unique index and maps to Conflict.
- No account enumeration: login fails with the same InvalidCredentials
  whether the email is unknown or the password is wrong, and both paths
  pay for one bcrypt verification.

bcrypt runs in Starlette's threadpool so a slow hash never blocks the
event loop for other requests.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from taskflow.auth.jwt import create_access_token
from taskflow.auth.password import dummy_hash, hash_password, verify_password
from taskflow.db.models import User, UserRole
from taskflow.db.repository import UserRepository
from taskflow.errors import Conflict, InvalidCredentials
from taskflow.schemas.auth import normalize_email

logger = structlog.get_logger()


@dataclass
class LoginResult:
    token: str
    user: User


class AuthService:
    """Business logic for the credential store."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    # ─── Register ────────────────────────────────────────

    async def register(
        self,
        email: str,
        password: str,
        role: UserRole = UserRole.user,
    ) -> User:
        email = normalize_email(email)
        if await self.users.find_by_email(email):
            raise Conflict("User already exists with this email")

        password_hash = await run_in_threadpool(hash_password, password)
        try:
            user = await self.users.create(
                email=email, password_hash=password_hash, role=role
            )
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("User already exists with this email")

        logger.info("auth.registered", user_id=str(user.id), role=user.role.value)
        return user

    # ─── Login ───────────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.users.find_by_email(normalize_email(email))
        if user is None:
            await run_in_threadpool(verify_password, password, dummy_hash())
            logger.info("auth.login_failed")
            raise InvalidCredentials()

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.info("auth.login_failed")
            raise InvalidCredentials()
        return user

    async def login(self, email: str, password: str) -> LoginResult:
        user = await self.authenticate(email, password)
        token = create_access_token(user.id, user.email, user.role)
        logger.info("auth.login", user_id=str(user.id))
        return LoginResult(token=token, user=user)

    # ─── Admin seeding ───────────────────────────────────

    async def ensure_admin(self, email: str, password: str) -> tuple[User, bool]:
        """Create an admin account unless the email is already taken.

        Returns (user, created). An existing account is left untouched,
        whatever its role.
        """
        existing: Optional[User] = await self.users.find_by_email(normalize_email(email))
        if existing:
            return existing, False
        user = await self.register(email, password, role=UserRole.admin)
        return user, True
