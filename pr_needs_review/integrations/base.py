"""
Accès au dépôt (abstrait) — PR Needs Review.

Le cœur (agrégateur, réconciliateur) ne connaît que cette interface.
Chaque implémentation (GitHub, mémoire) hérite de RepositoryAccess.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from pr_needs_review.models import Comment, PullRequest, Review

logger = logging.getLogger("pr_needs_review.access")

MAX_POLL_ATTEMPTS = 5
POLL_BACKOFF_MS = 30


class TransportFailure(RuntimeError):
    """Un appel d'accès au dépôt a échoué (statut hors 200–299 ou erreur réseau)."""

    def __init__(self, operation: str, status: int | None = None, message: str = ""):
        self.operation = operation
        self.status = status
        self.message = message
        detail = f" ({status})" if status is not None else ""
        super().__init__(f"{operation} a échoué{detail} : {message}" if message else f"{operation} a échoué{detail}")


class RepositoryAccess(ABC):
    """Capacité d'accès aux PR, revues, commentaires et labels d'un dépôt."""

    name: str = "RepositoryAccess"

    # ── Lecture ─────────────────────────────

    @abstractmethod
    def get_pull_request(self, number: int) -> PullRequest:
        ...

    @abstractmethod
    def list_reviews(self, number: int) -> list[Review]:
        """Revues dans l'ordre renvoyé par la source (jamais retriées)."""
        ...

    @abstractmethod
    def list_requested_reviewers(self, number: int) -> set[str]:
        ...

    @abstractmethod
    def list_issue_comments(self, number: int) -> list[Comment]:
        ...

    @abstractmethod
    def list_open_pull_requests(self) -> list[int]:
        ...

    # ── Écriture ────────────────────────────

    @abstractmethod
    def add_label(self, number: int, label: str) -> None:
        ...

    @abstractmethod
    def remove_label(self, number: int, label: str) -> None:
        ...

    @abstractmethod
    def create_comment(self, number: int, body: str) -> None:
        ...

    # ── Stabilisation du merge state ────────

    def get_stabilized_pull_request(
        self,
        number: int,
        attempts: int = MAX_POLL_ATTEMPTS,
        backoff_ms: int = POLL_BACKOFF_MS,
    ) -> PullRequest | None:
        """
        Relit la PR jusqu'à ce que GitHub ait calculé son mergeable_state.

        Juste après la création d'une PR, GitHub renvoie "unknown" le temps
        de calculer la fusion. Retourne None si l'état ne s'est pas
        stabilisé après `attempts` lectures.
        """
        for attempt in range(1, attempts + 1):
            pr = self.get_pull_request(number)
            state = (pr.mergeable_state or "unknown").lower()
            if state != "unknown":
                return pr
            logger.debug(f"PR #{number} : merge state inconnu (tentative {attempt}/{attempts})")
            if attempt < attempts:
                time.sleep(backoff_ms / 1000)
        logger.warning(f"PR #{number} : merge state toujours inconnu après {attempts} tentative(s)")
        return None
