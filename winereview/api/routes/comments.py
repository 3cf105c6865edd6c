"""
Comment Routes - discussion under reviews.

All comment routes need a session. Editing and deleting also need the
session of the comment's author.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from winereview.api.dependencies import get_comment_service, get_current_user_id
from winereview.models.common import ErrorResponse, Page
from winereview.models.reviews import CommentResponse, CreateCommentRequest, UpdateCommentRequest
from winereview.services.comment_service import COMMENT_SORT_FIELDS, CommentService
from winereview.services.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, page_request

router = APIRouter(
    prefix="/comments",
    tags=["Comments"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        403: {"model": ErrorResponse, "description": "No session, or not the comment's author"},
        404: {"model": ErrorResponse, "description": "Review or comment not found"},
    },
)


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a review",
)
def add_comment(
    request: CreateCommentRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
) -> CommentResponse:
    return service.add_comment(request, user_id)


@router.put("", response_model=CommentResponse, summary="Edit your comment")
def update_comment(
    request: UpdateCommentRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
) -> CommentResponse:
    return service.update_comment(request, user_id)


@router.get("", response_model=Page[CommentResponse], summary="List your own comments")
def list_my_comments(
    page: int = Query(default=DEFAULT_PAGE),
    size: int = Query(default=DEFAULT_PAGE_SIZE),
    sort: Optional[str] = Query(default=None, examples=["createdAt,asc"]),
    user_id: UUID = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
) -> Page[CommentResponse]:
    request = page_request(page, size, sort, COMMENT_SORT_FIELDS)
    return service.list_comments_by_user(user_id, request)


@router.get("/{review_id}", response_model=Page[CommentResponse], summary="List comments of a review")
def list_review_comments(
    review_id: UUID,
    page: int = Query(default=DEFAULT_PAGE),
    size: int = Query(default=DEFAULT_PAGE_SIZE),
    sort: Optional[str] = Query(default=None),
    user_id: UUID = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
) -> Page[CommentResponse]:
    """Oldest first, so the thread reads top to bottom."""
    request = page_request(page, size, sort, COMMENT_SORT_FIELDS)
    return service.list_comments_by_review(review_id, request)


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete your comment",
)
def delete_comment(
    comment_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
) -> Response:
    service.delete_comment(comment_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
