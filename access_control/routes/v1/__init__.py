# access_control/routes/v1/__init__.py
"""
API Routes

Thin routers mounted under /api; all business logic lives in the services.
"""

from . import access, auth, authorization, prometheus

__all__ = [
    "access",
    "auth",
    "authorization",
    "prometheus",
]
