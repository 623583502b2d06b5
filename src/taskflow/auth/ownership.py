"""Ownership guard shared by every single-resource task operation.

Read, update and delete all run the same check, so it lives in one place:

1. fetch the resource fresh from the store (absent → NotFound)
2. compare its owner with the caller (mismatch → Forbidden)

"Not found" and "not yours" are deliberately different errors.
"""

import uuid
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar

from taskflow.auth.dependencies import CurrentIdentity
from taskflow.errors import Forbidden, NotFound

T = TypeVar("T")


async def require_owner(
    fetch: Callable[[uuid.UUID], Awaitable[Optional[T]]],
    resource_id: uuid.UUID,
    identity: CurrentIdentity,
    owner_of: Callable[[T], uuid.UUID],
    resource_name: str = "Resource",
    action: str = "access",
) -> T:
    """Return the resource if the caller owns it."""
    resource = await fetch(resource_id)
    if resource is None:
        raise NotFound(f"{resource_name} not found")
    if owner_of(resource) != identity.user_id:
        raise Forbidden(f"Not authorized to {action} this {resource_name.lower()}")
    return resource
