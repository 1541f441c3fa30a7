"""
Agrégateur revues / commentaires — PR Needs Review.

Réduit les revues, les reviewers en attente et les commentaires d'une PR
en un verdict unique : la PR a-t-elle besoin de modifications ?

  1. lastBlessed : date du dernier commentaire « bless »
     (le commentaire explicatif du bot est exclu)
  2. Revues antérieures à lastBlessed ignorées
  3. Dernier état indicatif par auteur (COMMENTED n'écrase jamais)
  4. Reviewers en attente forcés à PENDING
  5. needs_changes ⇔ au moins un auteur en CHANGES_REQUESTED
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from pr_needs_review.integrations.base import RepositoryAccess
from pr_needs_review.models import (
    AggregationResult,
    ApprovalStatus,
    Comment,
    LabelPolicy,
    Review,
    ReviewState,
)
from pr_needs_review.utils.helpers import as_utc, contains_phrase

logger = logging.getLogger("pr_needs_review.aggregator")


# ════════════════════════════════════════════
#  Fonctions pures
# ════════════════════════════════════════════

def last_blessed_at(comments: Iterable[Comment], policy: LabelPolicy) -> datetime | None:
    """Date (updated_at) du commentaire « bless » le plus récent, ou None."""
    last: datetime | None = None
    for comment in comments:
        if comment.body == policy.needs_changes_comment:
            logger.debug(f" - Commentaire explicatif {comment.id} ignoré")
            continue
        if not contains_phrase(comment.body, policy.bless_comment):
            logger.debug(f" - Commentaire sans rapport {comment.id} ignoré")
            continue
        updated_at = as_utc(comment.updated_at)
        logger.info(f" - Modifications bénies le {updated_at.isoformat()}")
        if last is None or updated_at > last:
            last = updated_at
    return last


def _status_of(review: Review) -> ApprovalStatus | None:
    """État d'approbation porté par une revue (None si non indicative)."""
    if review.state is ReviewState.APPROVED:
        return ApprovalStatus.APPROVED
    if review.state is ReviewState.CHANGES_REQUESTED:
        return ApprovalStatus.CHANGES_REQUESTED
    if review.state is ReviewState.COMMENTED:
        return None
    if review.state is ReviewState.OTHER:
        return ApprovalStatus.CHANGES_REQUESTED
    raise ValueError(f"État de revue non géré : {review.state}")


def reviews_since(reviews: Iterable[Review], since: datetime | None) -> list[Review]:
    """Garde les revues soumises à partir de `since` (toutes si None)."""
    if since is None:
        return list(reviews)
    since = as_utc(since)
    return [
        review for review in reviews
        if review.submitted_at is not None and as_utc(review.submitted_at) >= since
    ]


def approval_status_by_author(
    reviews: Iterable[Review],
    pending: Iterable[str],
    since: datetime | None = None,
) -> dict[str, ApprovalStatus]:
    """Réduit les revues (dans l'ordre de la source) en un état par auteur."""
    status: dict[str, ApprovalStatus] = {}
    for review in reviews_since(reviews, since):
        current = _status_of(review)
        logger.debug(f"  Reviewer {review.author} : {review.state.value}")
        if current is not None:
            status[review.author] = current
    for user in pending:
        logger.info(f"Revues précédentes de {user} ignorées : une revue est en attente")
        status[user] = ApprovalStatus.PENDING
    return status


def needs_changes_from(status: dict[str, ApprovalStatus]) -> bool:
    needs_changes = False
    for author, value in status.items():
        if value is ApprovalStatus.CHANGES_REQUESTED:
            logger.info(f"Modifications demandées par {author}")
            needs_changes = True
    return needs_changes


# ════════════════════════════════════════════
#  Agrégateur
# ════════════════════════════════════════════

class ReviewAggregator:
    """Lit revues, reviewers en attente et commentaires, puis produit le verdict."""

    def __init__(self, access: RepositoryAccess, policy: LabelPolicy):
        self._access = access
        self._policy = policy

    def evaluate(self, pr_number: int) -> AggregationResult:
        comments = self._access.list_issue_comments(pr_number)
        last_blessed = last_blessed_at(comments, self._policy)
        if last_blessed is not None:
            logger.info(f"Dernière bénédiction de la PR #{pr_number} : {last_blessed.isoformat()}")

        reviews = self._access.list_reviews(pr_number)
        live_reviews = reviews_since(reviews, last_blessed)
        logger.debug(
            f"PR #{pr_number} : {len(live_reviews)}/{len(reviews)} revue(s) postérieure(s) à la bénédiction"
        )

        pending = self._access.list_requested_reviewers(pr_number)
        logger.debug(f"{len(pending)} revue(s) en attente")

        status = approval_status_by_author(live_reviews, sorted(pending))
        return AggregationResult(
            needs_changes=needs_changes_from(status),
            last_blessed=last_blessed,
            approval_status=status,
            reviews_considered=len(live_reviews),
        )

    def needs_changes(self, pr_number: int) -> bool:
        return self.evaluate(pr_number).needs_changes
