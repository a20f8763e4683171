"""API v1 versioned router.

Router structure
----------------
PUBLIC (no auth):
  /health, /ready, /live    → health checks (liveness, readiness)

AUTHENTICATED (require valid JWT, checked per endpoint):
  /notifications/*          → the caller's own inbox, stats and preferences
  /access/me, /access/check → role, capabilities and status gate
  /patients/{id}/access     → granted / denied / restricted view state

ADMIN (capability enforced per endpoint):
  /admin/notifications/*    → issue and broadcast notifications (admin)
  /admin/users/*            → user management (users:read / users:write)
"""
from fastapi import APIRouter

from .endpoints import access, admin_notifications, admin_users, health, notifications

router = APIRouter(prefix="/api/v1")

# =========================================================================
# PUBLIC ENDPOINTS (no auth required)
# =========================================================================

router.include_router(health.router, tags=["Health"])

# =========================================================================
# AUTHENTICATED ENDPOINTS
# =========================================================================
# Every endpoint below declares CurrentActor (or a stricter alias) itself,
# so the actor is resolved once per request and reused by the handler.

router.include_router(notifications.router)
router.include_router(access.router)

# =========================================================================
# ADMIN ENDPOINTS
# =========================================================================

router.include_router(admin_notifications.router)
router.include_router(admin_users.router)
