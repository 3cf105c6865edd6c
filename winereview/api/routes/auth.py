"""
Authentication Routes - trade an identity for a session credential.

POST /auth/google is the production sign-in. POST /auth/login signs in
an existing user by email alone and is only mounted when
ENABLE_EMAIL_LOGIN is on (the development default).
"""
from fastapi import APIRouter, Depends

from winereview.core.logging_config import get_logger
from winereview.models.auth import AuthResponse, GoogleAuthRequest, LoginRequest, LoginResponse
from winereview.models.common import ErrorResponse
from winereview.api.dependencies import get_identity_service
from winereview.services.identity import IdentityExchangeService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={400: {"model": ErrorResponse, "description": "Invalid request body"}},
)

login_router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/google",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    summary="Sign in with a Google ID token",
    responses={401: {"model": ErrorResponse, "description": "Token rejected"}},
)
def google_sign_in(
    request: GoogleAuthRequest,
    service: IdentityExchangeService = Depends(get_identity_service),
) -> AuthResponse:
    """
    Verify the Google ID token and return a session credential.

    The user is created on first sign-in and their name, email and
    avatar are refreshed on every later one.
    """
    return service.exchange(request.google_id_token)


@login_router.post(
    "/login",
    response_model=LoginResponse,
    summary="Sign in by email (development only)",
    responses={500: {"model": ErrorResponse, "description": "No user with this email"}},
)
def email_login(
    request: LoginRequest,
    service: IdentityExchangeService = Depends(get_identity_service),
) -> LoginResponse:
    return service.login_by_email(request.email)
