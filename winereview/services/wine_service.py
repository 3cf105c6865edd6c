"""
Wine Service - the wine catalog.

Wines are read by everyone. Creating and deleting them is a curation
task with no per-user ownership, so it is available to services and the
seeding script but not exposed as a public endpoint. Deleting a wine
removes its reviews and their comments.
"""
from typing import Dict, Iterable, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from winereview.core.exceptions import NotFoundError
from winereview.core.logging_config import LoggerMixin
from winereview.core.validators import require_text, require_vintage, sanitize_text
from winereview.database.connection import DatabaseConnection
from winereview.database.models import Review, Wine
from winereview.models.catalog import CreateWineRequest, WineResponse
from winereview.models.common import Page
from winereview.services.lifecycle import DeletionReport, ResourceLifecycleManager, get_lifecycle_manager
from winereview.services.pagination import PageRequest, SortOrder, paginate

WINE_SORT_FIELDS = {
    "name": Wine.name,
    "year": Wine.year,
    "createdAt": Wine.created_at,
}
DEFAULT_WINE_SORT = SortOrder(field="name")


def rating_stats(session: Session, wine_ids: Iterable[UUID]) -> Dict[UUID, Tuple[Optional[float], int]]:
    """(average rating, review count) per wine; wines without reviews are absent."""
    ids = list(wine_ids)
    if not ids:
        return {}
    rows = session.execute(
        select(Review.wine_id, func.avg(Review.rating), func.count(Review.id))
        .where(Review.wine_id.in_(ids))
        .group_by(Review.wine_id)
    ).all()
    return {
        wine_id: (round(float(average), 2) if average is not None else None, count)
        for wine_id, average, count in rows
    }


def to_wine_response(wine: Wine, stats: Tuple[Optional[float], int] = (None, 0)) -> WineResponse:
    average_rating, review_count = stats
    return WineResponse(
        id=wine.id,
        name=wine.name,
        winery=wine.winery,
        country=wine.country,
        grape=wine.grape,
        year=wine.year,
        image_url=wine.image_url,
        created_at=wine.created_at,
        average_rating=average_rating,
        review_count=review_count,
    )


class WineService(LoggerMixin):
    """Business logic for the wine catalog."""

    def __init__(self, database: DatabaseConnection, lifecycle: Optional[ResourceLifecycleManager] = None):
        self.database = database
        self.lifecycle = lifecycle or get_lifecycle_manager()

    def create_wine(self, request: CreateWineRequest) -> WineResponse:
        """
        Raises:
            ValidationError: Blank name or implausible vintage
        """
        wine = Wine(
            name=require_text(request.name, "name", 160),
            winery=sanitize_text(request.winery),
            country=sanitize_text(request.country),
            grape=sanitize_text(request.grape),
            year=require_vintage(request.year),
            image_url=sanitize_text(request.image_url),
        )

        with self.database.get_session() as session:
            session.add(wine)
            session.flush()
            self.logger.info(f"Wine {wine.id} added to catalog: {wine.name!r}")
            return to_wine_response(wine)

    def get_wine(self, wine_id: UUID) -> WineResponse:
        with self.database.get_session() as session:
            wine = session.get(Wine, wine_id)
            if wine is None:
                raise NotFoundError("Wine", wine_id)
            return to_wine_response(wine, rating_stats(session, [wine.id]).get(wine.id, (None, 0)))

    def list_wines(
        self,
        page_request: PageRequest,
        name: Optional[str] = None,
        country: Optional[str] = None,
        winery: Optional[str] = None,
        grape: Optional[str] = None,
    ) -> Page[WineResponse]:
        """
        Browse the catalog.

        name matches as a case-insensitive substring; the other filters
        are case-insensitive exact matches. Filters combine with AND.
        """
        statement = select(Wine)

        name = sanitize_text(name)
        if name:
            statement = statement.where(Wine.name.ilike(f"%{name}%"))
        for column, value in ((Wine.country, country), (Wine.winery, winery), (Wine.grape, grape)):
            value = sanitize_text(value)
            if value:
                statement = statement.where(func.lower(column) == value.lower())

        with self.database.get_session() as session:
            result = paginate(
                session,
                statement,
                page_request,
                sort_fields=WINE_SORT_FIELDS,
                default_sort=DEFAULT_WINE_SORT,
                tiebreaker=Wine.id,
            )
            stats = rating_stats(session, (wine.id for wine in result.items))

            self.logger.info(f"Listed wines page={result.page} returned={len(result.items)}/{result.total_elements}")
            return Page[WineResponse](
                content=[to_wine_response(w, stats.get(w.id, (None, 0))) for w in result.items],
                page=result.page,
                size=result.size,
                total_elements=result.total_elements,
                total_pages=result.total_pages,
            )

    def delete_wine(self, wine_id: UUID) -> DeletionReport:
        """
        Remove a wine with all its reviews and their comments.

        Raises:
            NotFoundError: Wine does not exist
        """
        with self.database.get_session() as session:
            return self.lifecycle.delete(session, Wine, wine_id)
