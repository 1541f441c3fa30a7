"""
Modèles de données — PR Needs Review.

Tous les objets échangés entre le classifieur, l'agrégateur,
le réconciliateur et les clients d'accès au dépôt sont définis ici.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ════════════════════════════════════════════
#  Enums
# ════════════════════════════════════════════

class ReviewState(str, Enum):
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    OTHER = "OTHER"  # DISMISSED, PENDING…

    @classmethod
    def from_github(cls, raw: str | None) -> ReviewState:
        """Convertit l'état brut renvoyé par GitHub (insensible à la casse)."""
        value = (raw or "").strip().upper()
        if value == "APPROVED":
            return cls.APPROVED
        if value == "CHANGES_REQUESTED":
            return cls.CHANGES_REQUESTED
        if value == "COMMENTED":
            return cls.COMMENTED
        return cls.OTHER

    @property
    def is_indicative(self) -> bool:
        return self is not ReviewState.COMMENTED


class ApprovalStatus(str, Enum):
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    PENDING = "PENDING"


class Trigger(str, Enum):
    OPENED = "opened"
    READY_FOR_REVIEW = "ready_for_review"
    REVIEW_SUBMITTED = "review_submitted"
    CONVERTED_TO_DRAFT = "converted_to_draft"
    BLESS_COMMENT = "bless_comment"
    MANUAL = "manual"
    SKIP = "skip"


# ════════════════════════════════════════════
#  Objets GitHub (lecture fraîche à chaque appel)
# ════════════════════════════════════════════

class PullRequest(BaseModel):
    """Instantané d'une Pull Request."""
    number: int
    draft: bool = False
    labels: set[str] = Field(default_factory=set)
    requested_reviewers: set[str] = Field(default_factory=set)
    mergeable_state: Optional[str] = None

    def has_label(self, label: str) -> bool:
        wanted = label.lower()
        return any(existing.lower() == wanted for existing in self.labels)


class Review(BaseModel):
    author: str
    state: ReviewState
    submitted_at: Optional[datetime] = None


class Comment(BaseModel):
    id: int = 0
    author: str = ""
    body: str = ""
    updated_at: datetime


# ════════════════════════════════════════════
#  Politique de labellisation (fournie par l'appelant)
# ════════════════════════════════════════════

class LabelPolicy(BaseModel):
    """Noms de labels et textes de commentaires utilisés par le cœur."""
    ready_for_review_label: str = "awaiting-review"
    needs_changes_label: str = "awaiting-changes"
    bless_comment: str
    needs_changes_comment: str


# ════════════════════════════════════════════
#  Classifieur — décision de routage
# ════════════════════════════════════════════

class RoutingDecision(BaseModel):
    trigger: Trigger
    pr_number: Optional[int] = None
    reason: str = ""

    @property
    def should_run(self) -> bool:
        return self.trigger is not Trigger.SKIP and self.pr_number is not None


# ════════════════════════════════════════════
#  Agrégateur — verdict
# ════════════════════════════════════════════

class AggregationResult(BaseModel):
    """Verdict de l'agrégateur et valeurs intermédiaires."""
    needs_changes: bool = False
    last_blessed: Optional[datetime] = None
    approval_status: dict[str, ApprovalStatus] = Field(default_factory=dict)
    reviews_considered: int = 0


# ════════════════════════════════════════════
#  Réconciliateur — résultat
# ════════════════════════════════════════════

class ReconcileOutcome(BaseModel):
    """Effets de bord appliqués lors d'une réconciliation."""
    pr_number: Optional[int] = None
    trigger: Trigger = Trigger.MANUAL
    needs_changes: Optional[bool] = None
    labels_added: list[str] = Field(default_factory=list)
    labels_removed: list[str] = Field(default_factory=list)
    comment_posted: bool = False
    skipped_reason: str = ""

    @property
    def skipped(self) -> bool:
        return bool(self.skipped_reason)

    @property
    def api_calls(self) -> int:
        """Nombre d'appels en écriture effectués."""
        return len(self.labels_added) + len(self.labels_removed) + int(self.comment_posted)
