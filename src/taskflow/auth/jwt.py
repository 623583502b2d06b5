"""JWT token creation and verification.

JWT (JSON Web Token) provides stateless authentication. The token carries
the user's id (sub), email and role plus an expiry, signed with HS256 and
the process-wide secret. Claims are readable by the holder but cannot be
forged or altered without the secret.

There is no server-side session or revocation list: a token is valid until
it expires. Role or email changes only take effect once a new token is
issued at the next login.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from taskflow.config import settings
from taskflow.db.models import UserRole


class TokenError(Exception):
    """Raised when token verification fails."""


class InvalidToken(TokenError):
    """Signature mismatch or otherwise untrustworthy token."""


class TokenExpired(TokenError):
    """Token was valid but its exp has passed."""


class MalformedToken(TokenError):
    """Not a decodable JWT, or the claim set is incomplete."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    email: str
    role: UserRole
    expires_at: datetime


class TokenService:
    """Issues and verifies signed, expiring bearer tokens.

    Pure function of the secret and the wall clock: no per-token state, so
    any number of processes sharing the secret verify each other's tokens.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_minutes: float = 60):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = timedelta(minutes=ttl_minutes)

    def issue(
        self,
        user_id: uuid.UUID,
        email: str,
        role: UserRole,
        ttl: Optional[timedelta] = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + (self.ttl if ttl is None else ttl),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify and decode a token.

        The signature is checked first; no claim is looked at unless it
        passes. Raises InvalidToken, TokenExpired or MalformedToken.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired("Token has expired")
        except jwt.InvalidSignatureError:
            raise InvalidToken("Token signature is invalid")
        except (
            jwt.DecodeError,
            jwt.MissingRequiredClaimError,
            jwt.exceptions.InvalidSubjectError,
            jwt.InvalidIssuedAtError,
        ) as e:
            raise MalformedToken(f"Malformed token: {e}")
        except jwt.InvalidTokenError as e:
            raise InvalidToken(f"Invalid token: {e}")

        try:
            user_id = uuid.UUID(payload["sub"])
            role = UserRole(payload["role"])
            email = payload["email"]
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise MalformedToken(f"Malformed token claims: {e}")
        if not isinstance(email, str):
            raise MalformedToken("Malformed token claims: email")

        return TokenClaims(
            user_id=user_id,
            email=email,
            role=role,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


# Singleton: configured from settings
token_service = TokenService(
    secret=settings.jwt_secret,
    algorithm=settings.jwt_algorithm,
    ttl_minutes=settings.access_token_expire_minutes,
)


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: UserRole,
    expires_minutes: Optional[float] = None,
) -> str:
    """Create a JWT access token. expires_minutes=0 issues an already-expired token."""
    ttl = None if expires_minutes is None else timedelta(minutes=expires_minutes)
    return token_service.issue(user_id, email, role, ttl=ttl)


def verify_token(token: str) -> TokenClaims:
    """Verify a token against the configured secret."""
    return token_service.verify(token)
