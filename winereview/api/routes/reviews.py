"""
Review Routes - wine reviews.

Reads are public. Creating needs a session; updating and deleting need
the session of the review's author.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from winereview.api.dependencies import get_current_user_id, get_review_service
from winereview.models.common import ErrorResponse, Page
from winereview.models.reviews import CreateReviewRequest, ReviewResponse, UpdateReviewRequest
from winereview.services.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, page_request
from winereview.services.review_service import REVIEW_SORT_FIELDS, ReviewService

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        404: {"model": ErrorResponse, "description": "Review, wine or user not found"},
    },
)

_OWNER_ONLY = {403: {"model": ErrorResponse, "description": "No session, or not the review's author"}}


@router.post(
    "",
    response_model=ReviewResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Review a wine",
    responses={403: {"model": ErrorResponse, "description": "No valid session"}},
)
def create_review(
    request: CreateReviewRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    return service.create_review(request, user_id)


@router.get(
    "",
    response_model=Page[ReviewResponse],
    response_model_exclude_none=True,
    summary="List reviews",
)
def list_reviews(
    wine_id: Optional[UUID] = Query(default=None, alias="wineId"),
    user_id: Optional[UUID] = Query(default=None, alias="userId"),
    page: int = Query(default=DEFAULT_PAGE, description="Zero-based page index"),
    size: int = Query(default=DEFAULT_PAGE_SIZE),
    sort: Optional[str] = Query(default=None, examples=["rating,desc"]),
    service: ReviewService = Depends(get_review_service),
) -> Page[ReviewResponse]:
    """
    Reviews filtered by wine and/or author, newest last by default.

    Sortable by createdAt, updatedAt and rating.
    """
    request = page_request(page, size, sort, REVIEW_SORT_FIELDS)
    return service.list_reviews(request, wine_id=wine_id, user_id=user_id)


@router.get(
    "/{review_id}",
    response_model=ReviewResponse,
    response_model_exclude_none=True,
    summary="Get one review",
)
def get_review(review_id: UUID, service: ReviewService = Depends(get_review_service)) -> ReviewResponse:
    return service.get_review(review_id)


@router.put(
    "/{review_id}",
    response_model=ReviewResponse,
    response_model_exclude_none=True,
    summary="Update your review",
    responses=_OWNER_ONLY,
)
def update_review(
    review_id: UUID,
    request: UpdateReviewRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    return service.update_review(review_id, request, user_id)


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete your review and its comments",
    responses=_OWNER_ONLY,
)
def delete_review(
    review_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: ReviewService = Depends(get_review_service),
) -> Response:
    service.delete_review(review_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
