"""FastAPI auth dependencies.

These are used as Depends() in routers and route handlers to extract and
validate the caller's identity from the request.

- get_current_user: the auth gate. Reads "Authorization: Bearer <jwt>",
  verifies it and returns a CurrentIdentity built from the token claims.
  No database lookup happens here.
- require_roles: the role gate. Depends on get_current_user, so it can
  only ever run after authentication succeeded.
"""

import uuid
from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from taskflow.auth.jwt import TokenError, verify_token
from taskflow.db.models import UserRole
from taskflow.errors import Forbidden, Unauthenticated

logger = structlog.get_logger()


class CurrentIdentity:
    """The authenticated identity making the request.

    Role-based branching works off the role tag; there is no user
    subclass hierarchy.
    """

    def __init__(self, user_id: uuid.UUID, email: str, role: UserRole = UserRole.user):
        self.user_id = user_id
        self.email = email
        self.role = role

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id}, role={self.role.value})"


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Extract current identity (required: 401 if missing or invalid)."""
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthenticated("Not authorized, no token")

    try:
        claims = verify_token(token)
    except TokenError as e:
        logger.info(
            "auth.token_rejected",
            reason=type(e).__name__,
            path=request.url.path,
        )
        raise Unauthenticated("Not authorized, token failed")

    identity = CurrentIdentity(
        user_id=claims.user_id,
        email=claims.email,
        role=claims.role,
    )
    request.state.identity = identity
    return identity


def require_roles(*roles: UserRole):
    """Build a dependency that only lets the given roles through.

    Chaining several of these ANDs them together.
    """
    allowed = frozenset(roles)

    async def _role_gate(
        identity: CurrentIdentity = Depends(get_current_user),
    ) -> CurrentIdentity:
        if identity.role not in allowed:
            logger.info(
                "auth.role_denied",
                user_id=str(identity.user_id),
                role=identity.role.value,
                required=sorted(r.value for r in allowed),
            )
            raise Forbidden(
                f"User role '{identity.role.value}' is not authorized to access this route"
            )
        return identity

    return _role_gate


require_admin = require_roles(UserRole.admin)
