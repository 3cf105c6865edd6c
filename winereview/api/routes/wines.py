"""
Wine Routes - public, read-only catalog browsing.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from winereview.api.dependencies import get_wine_service
from winereview.models.catalog import WineResponse
from winereview.models.common import ErrorResponse, Page
from winereview.services.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, page_request
from winereview.services.wine_service import WINE_SORT_FIELDS, WineService

router = APIRouter(
    prefix="/wines",
    tags=["Wines"],
    responses={404: {"model": ErrorResponse, "description": "Wine not found"}},
)


@router.get("", response_model=Page[WineResponse], response_model_exclude_none=True, summary="Browse wines")
def list_wines(
    name: Optional[str] = Query(default=None, description="Case-insensitive substring"),
    country: Optional[str] = None,
    winery: Optional[str] = None,
    grape: Optional[str] = None,
    page: int = Query(default=DEFAULT_PAGE),
    size: int = Query(default=DEFAULT_PAGE_SIZE),
    sort: Optional[str] = Query(default=None, examples=["year,desc"]),
    service: WineService = Depends(get_wine_service),
) -> Page[WineResponse]:
    request = page_request(page, size, sort, WINE_SORT_FIELDS)
    return service.list_wines(request, name=name, country=country, winery=winery, grape=grape)


@router.get("/{wine_id}", response_model=WineResponse, response_model_exclude_none=True, summary="Get one wine")
def get_wine(wine_id: UUID, service: WineService = Depends(get_wine_service)) -> WineResponse:
    return service.get_wine(wine_id)
