"""
API Routes module - Endpoint definitions.

Each file in this module defines routes for a specific domain:
- auth.py     : Sign-in (Google ID token, development email login)
- reviews.py  : Wine reviews
- comments.py : Comments on reviews
- files.py    : Image uploads
- users.py    : The signed-in user's account
- wines.py    : Catalog browsing
- health.py   : Health check endpoints
"""
from winereview.api.routes.auth import router as auth_router
from winereview.api.routes.auth import login_router
from winereview.api.routes.comments import router as comments_router
from winereview.api.routes.files import router as files_router
from winereview.api.routes.health import router as health_router
from winereview.api.routes.reviews import router as reviews_router
from winereview.api.routes.users import router as users_router
from winereview.api.routes.wines import router as wines_router

__all__ = [
    "auth_router",
    "login_router",
    "comments_router",
    "files_router",
    "health_router",
    "reviews_router",
    "users_router",
    "wines_router",
]
