"""API route aggregation.

All routers registered here get mounted in main.py.

Auth is applied at the include_router level using FastAPI's dependencies
parameter. This protects all routes in each router without modifying
individual handlers. The admin router gets the role gate on top. Health
and auth routers are open (auth's /me declares its own dependency).
"""

from fastapi import APIRouter, Depends

from taskflow.api.admin import router as admin_router
from taskflow.api.auth import router as auth_router
from taskflow.api.health import router as health_router
from taskflow.api.tasks import router as tasks_router
from taskflow.auth.dependencies import get_current_user, require_admin

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes: no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: require a valid bearer token
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
api_router.include_router(
    admin_router, tags=["admin"], dependencies=[*_auth, Depends(require_admin)]
)
