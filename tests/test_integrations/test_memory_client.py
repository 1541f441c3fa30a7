"""Tests du dépôt en mémoire."""

import pytest

from pr_needs_review.integrations.base import TransportFailure
from pr_needs_review.integrations.memory_client import InMemoryRepository
from pr_needs_review.models import ReviewState


class TestInMemoryRepository:
    """Tests pour InMemoryRepository."""

    def test_snapshots_are_independent(self, repo):
        snapshot = repo.get_pull_request(42)
        snapshot.labels.add("local-only")

        assert repo.labels_of(42) == set()

    def test_unknown_pr_is_not_found(self, repo):
        with pytest.raises(TransportFailure) as exc_info:
            repo.get_pull_request(999)

        assert exc_info.value.status == 404

    def test_submitting_review_clears_pending_request(self, repo):
        repo.request_review(42, "alice")
        repo.submit_review(42, "alice", "approved")

        assert repo.list_requested_reviewers(42) == set()
        assert repo.list_reviews(42)[0].state == ReviewState.APPROVED

    def test_logical_clock_orders_events(self, repo):
        review = repo.submit_review(42, "alice", ReviewState.CHANGES_REQUESTED)
        comment = repo.post_comment(42, "done")

        assert comment.updated_at > review.submitted_at

    def test_writes_are_recorded(self, repo):
        repo.add_label(42, "awaiting-review")
        repo.remove_label(42, "AWAITING-REVIEW")
        repo.create_comment(42, "hello")

        assert repo.calls == [
            ("add_label", 42, "awaiting-review"),
            ("remove_label", 42, "AWAITING-REVIEW"),
            ("create_comment", 42, "hello"),
        ]
        assert repo.labels_of(42) == set()
        assert repo.comments_of(42)[-1].body == "hello"

    def test_injected_failure(self):
        repository = InMemoryRepository()
        repository.open_pull_request(1)
        repository.fail_on("create_comment", status=422)

        with pytest.raises(TransportFailure) as exc_info:
            repository.create_comment(1, "x")

        assert exc_info.value.status == 422
        assert repository.calls == []
