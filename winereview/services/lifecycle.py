"""
Resource Lifecycle Manager - atomic cascading deletion.

Dependencies between entities are declared once, as a small directed
graph (CASCADE_RULES):

    User   -> Review  (review.user_id)
    User   -> Comment (comment.author_id)
    Wine   -> Review  (review.wine_id)
    Review -> Comment (comment.review_id)

Deleting a node walks the graph and removes dependents bottom-up
(grandchildren first) inside the caller's transaction, then deletes the
node itself. The same rules exist as ON DELETE CASCADE constraints in the
schema, so even a crash mid-way cannot leave orphaned rows: either the
transaction commits as a whole or nothing is deleted.

Ownership is checked by the caller before delete() is invoked for the
explicitly requested resource; cascaded children are not re-checked.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple, Type
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from winereview.core.exceptions import NotFoundError
from winereview.core.logging_config import LoggerMixin
from winereview.database.models import Base, Comment, Review, User, Wine


@dataclass(frozen=True)
class CascadeRule:
    """Deleting a `parent` row deletes every `child` row whose `foreign_key` points at it."""
    parent: Type[Base]
    child: Type[Base]
    foreign_key: str


CASCADE_RULES: Tuple[CascadeRule, ...] = (
    CascadeRule(parent=User, child=Review, foreign_key="user_id"),
    CascadeRule(parent=User, child=Comment, foreign_key="author_id"),
    CascadeRule(parent=Wine, child=Review, foreign_key="wine_id"),
    CascadeRule(parent=Review, child=Comment, foreign_key="review_id"),
)


@dataclass
class DeletionReport:
    """Rows removed by one delete, keyed by entity name."""
    resource_type: str
    resource_id: UUID
    deleted: Dict[str, int] = field(default_factory=dict)

    def add(self, model: Type[Base], count: int) -> None:
        if count:
            self.deleted[model.__name__] = self.deleted.get(model.__name__, 0) + count

    def count(self, model: Type[Base]) -> int:
        return self.deleted.get(model.__name__, 0)

    @property
    def total(self) -> int:
        return sum(self.deleted.values())

    def summary(self) -> str:
        parts = ", ".join(f"{name}={count}" for name, count in sorted(self.deleted.items()))
        return f"{self.resource_type} {self.resource_id} ({parts or 'nothing'})"


class ResourceLifecycleManager(LoggerMixin):
    """
    Executes deletions according to the declared cascade graph.

    Example:
        >>> manager = ResourceLifecycleManager()
        >>> with db.get_session() as session:
        ...     report = manager.delete(session, Review, review_id)
        >>> report.count(Comment)
        3
    """

    def __init__(self, rules: Sequence[CascadeRule] = CASCADE_RULES):
        self.rules = tuple(rules)
        self._check_acyclic()

    def dependents_of(self, model: Type[Base]) -> List[CascadeRule]:
        """Rules whose parent is `model`, in declaration order."""
        return [rule for rule in self.rules if rule.parent is model]

    def delete(self, session: Session, model: Type[Base], resource_id: UUID) -> DeletionReport:
        """
        Delete one row and everything that depends on it.

        Must be called inside a transactional scope; the caller's commit
        or rollback decides the outcome for the whole cascade.

        Raises:
            NotFoundError: No row with this id (never existed, or deleted
                concurrently by another transaction)
        """
        report = DeletionReport(resource_type=model.__name__, resource_id=resource_id)

        self._delete_dependents(session, model, [resource_id], report)

        result = session.execute(delete(model).where(model.id == resource_id))
        if result.rowcount == 0:
            self.logger.warning(f"Delete of missing {model.__name__} {resource_id}")
            raise NotFoundError(model.__name__, resource_id)
        report.add(model, result.rowcount)

        self.logger.info(f"Deleted {report.summary()}")
        return report

    def _delete_dependents(
        self,
        session: Session,
        model: Type[Base],
        ids: Sequence[UUID],
        report: DeletionReport,
    ) -> None:
        for rule in self.dependents_of(model):
            foreign_key = getattr(rule.child, rule.foreign_key)
            child_ids = session.scalars(
                select(rule.child.id).where(foreign_key.in_(ids))
            ).all()
            if not child_ids:
                continue

            # Children's own dependents go first
            self._delete_dependents(session, rule.child, child_ids, report)

            result = session.execute(delete(rule.child).where(rule.child.id.in_(child_ids)))
            report.add(rule.child, result.rowcount)

    def _check_acyclic(self) -> None:
        """Reject rule sets that would recurse forever."""
        visiting = set()

        def visit(model: Type[Base]) -> None:
            if model in visiting:
                raise ValueError(f"Cascade rules contain a cycle through {model.__name__}")
            visiting.add(model)
            for rule in self.dependents_of(model):
                visit(rule.child)
            visiting.discard(model)

        for rule in self.rules:
            visit(rule.parent)


_lifecycle_manager = ResourceLifecycleManager()


def get_lifecycle_manager() -> ResourceLifecycleManager:
    """Shared manager for the default cascade graph."""
    return _lifecycle_manager
