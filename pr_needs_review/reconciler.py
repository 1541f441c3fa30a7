"""
Réconciliateur d'état — PR Needs Review.

Compare le verdict de l'agrégateur aux labels actuels de la PR et applique
le minimum d'ajouts / retraits de labels et de commentaires pour atteindre
l'état cible. Chaque opération est idempotente.
"""

from __future__ import annotations

import logging

from pr_needs_review.integrations.base import RepositoryAccess
from pr_needs_review.models import LabelPolicy, PullRequest, ReconcileOutcome, Trigger

logger = logging.getLogger("pr_needs_review.reconciler")


class StateReconciler:
    """Applique l'état cible (labels + commentaire) sur une PR."""

    def __init__(self, access: RepositoryAccess, policy: LabelPolicy):
        self._access = access
        self._policy = policy

    # ── Labels ──────────────────────────────

    def ensure_label(
        self,
        pr: PullRequest,
        label: str,
        expected: bool,
        outcome: ReconcileOutcome,
    ) -> None:
        """Ajoute ou retire `label` seulement si sa présence diffère de `expected`."""
        if pr.has_label(label) == expected:
            if expected:
                logger.debug(f"La PR #{pr.number} a déjà le label {label}, rien à faire")
            else:
                logger.debug(f"La PR #{pr.number} n'a déjà pas le label {label}, rien à faire")
            return

        if expected:
            self._access.add_label(pr.number, label)
            pr.labels.add(label)
            outcome.labels_added.append(label)
        else:
            self._access.remove_label(pr.number, label)
            pr.labels = {existing for existing in pr.labels if existing.lower() != label.lower()}
            outcome.labels_removed.append(label)

    # ── Réconciliation ──────────────────────

    def retract_ready_label(
        self, pr: PullRequest, trigger: Trigger = Trigger.CONVERTED_TO_DRAFT
    ) -> ReconcileOutcome:
        """Variante réduite : retire seulement le label « prêt pour revue »."""
        outcome = ReconcileOutcome(pr_number=pr.number, trigger=trigger)
        logger.info(f"PR #{pr.number} en draft : retrait du label {self._policy.ready_for_review_label}")
        self.ensure_label(pr, self._policy.ready_for_review_label, False, outcome)
        return outcome

    def reconcile(
        self, pr: PullRequest, needs_changes: bool, trigger: Trigger = Trigger.MANUAL
    ) -> ReconcileOutcome:
        """Amène les labels (et le commentaire) de la PR vers l'état cible."""
        if pr.draft:
            # Le label needs-changes d'une PR draft n'est jamais touché
            return self.retract_ready_label(pr, trigger)

        policy = self._policy
        outcome = ReconcileOutcome(pr_number=pr.number, trigger=trigger, needs_changes=needs_changes)

        if needs_changes:
            if pr.has_label(policy.ready_for_review_label):
                logger.info(f"La PR #{pr.number} n'avait pas besoin de modifications : ajout du commentaire explicatif")
                self._access.create_comment(pr.number, policy.needs_changes_comment)
                outcome.comment_posted = True
            else:
                logger.debug(f"La PR #{pr.number} avait déjà besoin de modifications")
            self.ensure_label(pr, policy.needs_changes_label, True, outcome)
            self.ensure_label(pr, policy.ready_for_review_label, False, outcome)
        else:
            logger.debug(f"La PR #{pr.number} n'a pas besoin de modifications : en attente de revue")
            self.ensure_label(pr, policy.ready_for_review_label, True, outcome)
            self.ensure_label(pr, policy.needs_changes_label, False, outcome)

        return outcome
