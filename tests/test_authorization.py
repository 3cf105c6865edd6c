"""Tests for the ownership guard."""
import uuid
from dataclasses import dataclass

import pytest

from winereview.core.exceptions import ForbiddenError
from winereview.services.authorization import Forbidden, Proceed, authorize, require_owner


@dataclass
class Note:
    id: uuid.UUID
    owner_id: uuid.UUID


def test_owner_may_proceed():
    owner = uuid.uuid4()
    decision = authorize(owner, Note(id=uuid.uuid4(), owner_id=owner))

    assert decision == Proceed(requester_id=owner)


def test_other_user_is_forbidden():
    note = Note(id=uuid.uuid4(), owner_id=uuid.uuid4())
    stranger = uuid.uuid4()

    decision = authorize(stranger, note)

    assert isinstance(decision, Forbidden)
    assert decision.requester_id == stranger
    assert decision.resource_type == "Note"
    assert decision.resource_id == note.id


def test_missing_requester_is_forbidden():
    assert isinstance(authorize(None, Note(id=uuid.uuid4(), owner_id=uuid.uuid4())), Forbidden)


def test_require_owner_raises_forbidden_error():
    note = Note(id=uuid.uuid4(), owner_id=uuid.uuid4())

    with pytest.raises(ForbiddenError) as excinfo:
        require_owner(uuid.uuid4(), note)

    assert excinfo.value.status_code == 403
    assert excinfo.value.resource_id == note.id


def test_require_owner_passes_for_owner():
    owner = uuid.uuid4()
    require_owner(owner, Note(id=uuid.uuid4(), owner_id=owner))


def test_orm_models_expose_their_owner(make_user, make_wine, make_review, make_comment):
    author = make_user()
    commenter = make_user()
    review = make_review(author, make_wine())
    comment = make_comment(review, commenter)

    assert isinstance(authorize(author.id, review), Proceed)
    assert isinstance(authorize(commenter.id, review), Forbidden)
    assert isinstance(authorize(commenter.id, comment), Proceed)
    assert isinstance(authorize(author.id, comment), Forbidden)
    assert isinstance(authorize(author.id, author), Proceed)
