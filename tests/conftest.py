"""
Fixtures pytest — PR Needs Review.
"""

from datetime import datetime, timedelta, timezone

import pytest

from pr_needs_review.config import DEFAULT_BLESS_COMMENT, DEFAULT_NEEDS_CHANGES_COMMENT
from pr_needs_review.integrations.memory_client import InMemoryRepository
from pr_needs_review.models import LabelPolicy
from pr_needs_review.orchestrator import Labeler

READY = "awaiting-review"
NEEDS = "awaiting-changes"
T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Horodatage de test : T0 + `minutes`."""
    return T0 + timedelta(minutes=minutes)


@pytest.fixture
def policy() -> LabelPolicy:
    """Politique de labels par défaut."""
    return LabelPolicy(
        ready_for_review_label=READY,
        needs_changes_label=NEEDS,
        bless_comment=DEFAULT_BLESS_COMMENT,
        needs_changes_comment=DEFAULT_NEEDS_CHANGES_COMMENT,
    )


@pytest.fixture
def repo() -> InMemoryRepository:
    """Dépôt en mémoire avec une PR #42 ouverte, sans label."""
    repository = InMemoryRepository()
    repository.open_pull_request(42)
    return repository


@pytest.fixture
def labeler(repo, policy) -> Labeler:
    return Labeler(repo, policy)


@pytest.fixture
def opened_event() -> dict:
    return {"action": "opened", "pull_request": {"number": 42, "draft": False, "labels": []}}


@pytest.fixture
def review_event() -> dict:
    return {
        "action": "submitted",
        "pull_request": {"number": 42, "draft": False, "labels": []},
        "review": {
            "state": "changes_requested",
            "submitted_at": "2024-03-01T12:00:00Z",
            "user": {"login": "reviewer-alice"},
        },
    }


@pytest.fixture
def bless_event() -> dict:
    return {
        "action": "created",
        "issue": {"number": 42, "labels": [], "pull_request": {"url": "https://api.github.com/x"}},
        "comment": {"body": f"Done! {DEFAULT_BLESS_COMMENT.upper()}"},
    }
