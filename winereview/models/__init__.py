"""
Models module - Pydantic schemas for data validation.

This module defines:
- Request models: Input validation for API endpoints
- Response models: Output formatting for API responses (camelCase on the wire)
"""
from winereview.models.common import CamelModel, Page, HealthResponse, ErrorResponse
from winereview.models.auth import GoogleAuthRequest, LoginRequest, AuthResponse, LoginResponse
from winereview.models.catalog import UserSummary, UserResponse, WineSummary, WineResponse, CreateWineRequest
from winereview.models.reviews import (
    CreateReviewRequest,
    UpdateReviewRequest,
    ReviewResponse,
    CreateCommentRequest,
    UpdateCommentRequest,
    CommentResponse,
)
from winereview.models.files import FileUploadResponse

__all__ = [
    "CamelModel",
    "Page",
    "HealthResponse",
    "ErrorResponse",
    "GoogleAuthRequest",
    "LoginRequest",
    "AuthResponse",
    "LoginResponse",
    "UserSummary",
    "UserResponse",
    "WineSummary",
    "WineResponse",
    "CreateWineRequest",
    "CreateReviewRequest",
    "UpdateReviewRequest",
    "ReviewResponse",
    "CreateCommentRequest",
    "UpdateCommentRequest",
    "CommentResponse",
    "FileUploadResponse",
]
