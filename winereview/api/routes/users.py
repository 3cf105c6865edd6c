"""User Routes - the signed-in user's own account."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from winereview.api.dependencies import get_current_user_id, get_user_service
from winereview.models.catalog import UserResponse
from winereview.models.common import ErrorResponse
from winereview.services.user_service import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={403: {"model": ErrorResponse, "description": "No valid session"}},
)


@router.get("/me", response_model=UserResponse, response_model_exclude_none=True, summary="Your profile")
def get_me(
    user_id: UUID = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return service.get_profile(user_id)


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete your account, reviews and comments",
)
def delete_me(
    user_id: UUID = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
) -> Response:
    service.delete_user(user_id, requester_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
