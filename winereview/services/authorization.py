"""
Authorization Guard - ownership check for every Review/Comment mutation.

authorize() is a pure predicate returning a tagged decision (Proceed or
Forbidden); it never raises, so the decision can be inspected and tested
on its own. require_owner() is the thin adapter services call to turn a
Forbidden decision into a ForbiddenError.

Having a valid session is checked earlier, by the API layer. A session
only proves identity; ownership is decided here.
"""
from dataclasses import dataclass
from typing import Optional, Protocol, Union
from uuid import UUID

from winereview.core.exceptions import ForbiddenError
from winereview.core.logging_config import get_logger

logger = get_logger(__name__)


class OwnedResource(Protocol):
    """Anything with an owning user (Review, Comment, or a User itself)."""

    @property
    def id(self) -> UUID: ...

    @property
    def owner_id(self) -> UUID: ...


@dataclass(frozen=True)
class Proceed:
    """The requester owns the resource."""
    requester_id: UUID


@dataclass(frozen=True)
class Forbidden:
    """The requester is authenticated but does not own the resource."""
    requester_id: UUID
    resource_type: str
    resource_id: Optional[UUID]

    def to_error(self) -> ForbiddenError:
        return ForbiddenError(self.requester_id, self.resource_type, self.resource_id)


AuthorizationDecision = Union[Proceed, Forbidden]


def authorize(requester_id: UUID, resource: OwnedResource) -> AuthorizationDecision:
    """
    Decide whether requester_id may mutate resource.

    Proceed iff resource.owner_id == requester_id, Forbidden otherwise.
    """
    if requester_id is not None and resource.owner_id == requester_id:
        return Proceed(requester_id=requester_id)

    return Forbidden(
        requester_id=requester_id,
        resource_type=type(resource).__name__,
        resource_id=getattr(resource, "id", None),
    )


def require_owner(requester_id: UUID, resource: OwnedResource) -> None:
    """
    Enforce ownership at a service boundary.

    Raises:
        ForbiddenError: The requester does not own the resource
    """
    decision = authorize(requester_id, resource)
    if isinstance(decision, Forbidden):
        logger.warning(
            f"Ownership check failed: user={requester_id} "
            f"{decision.resource_type}={decision.resource_id}"
        )
        raise decision.to_error()
