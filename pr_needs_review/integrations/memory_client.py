"""
Dépôt en mémoire — PR Needs Review.

Implémentation de RepositoryAccess sans réseau, utilisée par les tests,
la simulation locale et les exécutions à blanc. Chaque écriture est
enregistrée dans `calls`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from pr_needs_review.integrations.base import RepositoryAccess, TransportFailure
from pr_needs_review.models import Comment, PullRequest, Review, ReviewState

logger = logging.getLogger("pr_needs_review.memory")


class InMemoryRepository(RepositoryAccess):
    """Dépôt fictif : PR, revues, commentaires et labels tenus en mémoire."""

    name = "memory"

    def __init__(self):
        self._pulls: dict[int, PullRequest] = {}
        self._reviews: dict[int, list[Review]] = {}
        self._comments: dict[int, list[Comment]] = {}
        self._failures: dict[str, int] = {}
        self._merge_states: dict[int, list[str]] = {}
        self.calls: list[tuple[str, int, str]] = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    # ── Préparation des données ─────────────

    def open_pull_request(
        self,
        number: int,
        draft: bool = False,
        labels: set[str] | None = None,
        mergeable_state: str = "clean",
    ) -> PullRequest:
        pr = PullRequest(
            number=number,
            draft=draft,
            labels=set(labels or ()),
            mergeable_state=mergeable_state,
        )
        self._pulls[number] = pr
        self._reviews.setdefault(number, [])
        self._comments.setdefault(number, [])
        return pr

    def set_draft(self, number: int, draft: bool) -> None:
        self._require(number).draft = draft

    def request_review(self, number: int, user: str) -> None:
        self._require(number).requested_reviewers.add(user)

    def submit_review(
        self,
        number: int,
        author: str,
        state: ReviewState | str,
        submitted_at: datetime | None = None,
    ) -> Review:
        if not isinstance(state, ReviewState):
            state = ReviewState.from_github(state)
        review = Review(author=author, state=state, submitted_at=submitted_at or self._tick())
        self._reviews[number].append(review)
        # Soumettre une revue retire l'auteur des reviewers en attente
        self._require(number).requested_reviewers.discard(author)
        return review

    def post_comment(
        self,
        number: int,
        body: str,
        author: str = "someone",
        updated_at: datetime | None = None,
    ) -> Comment:
        comments = self._comments[number]
        comment = Comment(
            id=len(comments) + 1,
            author=author,
            body=body,
            updated_at=updated_at or self._tick(),
        )
        comments.append(comment)
        return comment

    def queue_merge_states(self, number: int, *states: str) -> None:
        """Merge states renvoyés successivement par get_pull_request."""
        self._merge_states[number] = list(states)

    def fail_on(self, operation: str, status: int = 500) -> None:
        """Injecte un échec pour une opération (ex: "add_label")."""
        self._failures[operation] = status

    def labels_of(self, number: int) -> set[str]:
        return set(self._require(number).labels)

    def comments_of(self, number: int) -> list[Comment]:
        return list(self._comments[number])

    # ── RepositoryAccess : lecture ──────────

    def get_pull_request(self, number: int) -> PullRequest:
        self._maybe_fail("get_pull_request")
        pr = self._require(number)
        queued = self._merge_states.get(number)
        if queued:
            pr.mergeable_state = queued.pop(0)
        return pr.model_copy(deep=True)

    def list_reviews(self, number: int) -> list[Review]:
        self._maybe_fail("list_reviews")
        return [review.model_copy() for review in self._reviews[number]]

    def list_requested_reviewers(self, number: int) -> set[str]:
        self._maybe_fail("list_requested_reviewers")
        return set(self._require(number).requested_reviewers)

    def list_issue_comments(self, number: int) -> list[Comment]:
        self._maybe_fail("list_issue_comments")
        return [comment.model_copy() for comment in self._comments[number]]

    def list_open_pull_requests(self) -> list[int]:
        self._maybe_fail("list_open_pull_requests")
        return sorted(self._pulls)

    # ── RepositoryAccess : écriture ─────────

    def add_label(self, number: int, label: str) -> None:
        self._maybe_fail("add_label")
        self.calls.append(("add_label", number, label))
        self._require(number).labels.add(label)

    def remove_label(self, number: int, label: str) -> None:
        self._maybe_fail("remove_label")
        self.calls.append(("remove_label", number, label))
        pr = self._require(number)
        pr.labels = {existing for existing in pr.labels if existing.lower() != label.lower()}

    def create_comment(self, number: int, body: str) -> None:
        self._maybe_fail("create_comment")
        self.calls.append(("create_comment", number, body))
        self.post_comment(number, body, author="pr-needs-review[bot]")

    # ── Interne ─────────────────────────────

    def _require(self, number: int) -> PullRequest:
        if number not in self._pulls:
            raise TransportFailure(f"GET pull #{number}", 404, "Not Found")
        return self._pulls[number]

    def _tick(self) -> datetime:
        """Horloge logique : chaque événement non daté avance d'une minute."""
        self._clock += timedelta(minutes=1)
        return self._clock

    def _maybe_fail(self, operation: str) -> None:
        status = self._failures.get(operation)
        if status is not None:
            logger.error(f"Échec injecté : {operation} ({status})")
            raise TransportFailure(operation, status, "injected failure")
