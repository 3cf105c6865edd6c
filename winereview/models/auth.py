"""Request and response models for the /auth endpoints."""
from typing import Optional
from uuid import UUID

from pydantic import Field

from winereview.models.common import CamelModel


class GoogleAuthRequest(CamelModel):
    """Body of POST /auth/google."""
    google_id_token: str = Field(
        ...,
        description="ID token obtained by the client from Google Sign-In",
    )


class LoginRequest(CamelModel):
    """Body of POST /auth/login (development only)."""
    email: str = Field(..., max_length=180, examples=["dev@winereviewer.local"])


class AuthResponse(CamelModel):
    """Session credential plus the public summary of the signed-in user."""
    token: str
    user_id: UUID
    email: str
    display_name: str
    avatar_url: Optional[str] = None


class LoginResponse(CamelModel):
    token: str
    user_id: UUID
    email: str
    display_name: str
