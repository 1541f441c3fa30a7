"""
Orchestrateur principal — PR Needs Review.

Enchaîne les trois composants pour chaque invocation :
  Étape 1 — Classifieur   : l'événement déclenche-t-il une réconciliation ?
  Étape 2 — Agrégateur    : la PR a-t-elle besoin de modifications ?
  Étape 3 — Réconciliateur : labels + commentaire vers l'état cible

Toutes les lectures sont fraîches : aucun état n'est gardé entre deux appels.
"""

from __future__ import annotations

import logging
from typing import Any

from pr_needs_review.aggregator import ReviewAggregator
from pr_needs_review.classifier import classify
from pr_needs_review.integrations.base import (
    MAX_POLL_ATTEMPTS,
    POLL_BACKOFF_MS,
    RepositoryAccess,
)
from pr_needs_review.models import (
    LabelPolicy,
    PullRequest,
    ReconcileOutcome,
    RoutingDecision,
    Trigger,
)
from pr_needs_review.reconciler import StateReconciler

logger = logging.getLogger("pr_needs_review.orchestrator")


class Labeler:
    """
    Chef d'orchestre PR Needs Review.

    Reçoit un accès au dépôt et une politique de labels explicites ;
    aucune configuration globale n'est lue ici.
    """

    def __init__(
        self,
        access: RepositoryAccess,
        policy: LabelPolicy,
        wait_for_merge_state: bool = False,
        merge_state_attempts: int = MAX_POLL_ATTEMPTS,
        merge_state_backoff_ms: int = POLL_BACKOFF_MS,
    ):
        self.access = access
        self.policy = policy
        self.aggregator = ReviewAggregator(access, policy)
        self.reconciler = StateReconciler(access, policy)
        self._wait_for_merge_state = wait_for_merge_state
        self._merge_state_attempts = merge_state_attempts
        self._merge_state_backoff_ms = merge_state_backoff_ms

    # ════════════════════════════════════════
    #  ÉVÉNEMENTS
    # ════════════════════════════════════════

    def classify(self, payload: dict[str, Any]) -> RoutingDecision:
        return classify(payload, self.policy)

    def handle_event(self, payload: dict[str, Any]) -> ReconcileOutcome:
        """Point d'entrée principal : classe l'événement puis réconcilie la PR visée."""
        return self.dispatch(self.classify(payload))

    def dispatch(self, decision: RoutingDecision) -> ReconcileOutcome:
        """Exécute la réconciliation correspondant à une décision déjà prise."""
        if not decision.should_run:
            return ReconcileOutcome(trigger=Trigger.SKIP, skipped_reason=decision.reason)

        if decision.trigger is Trigger.CONVERTED_TO_DRAFT:
            return self.retract_ready_label(decision.pr_number)
        return self.update_pr(decision.pr_number, trigger=decision.trigger)

    # ════════════════════════════════════════
    #  RÉCONCILIATION
    # ════════════════════════════════════════

    def update_pr(self, pr_number: int, trigger: Trigger = Trigger.MANUAL) -> ReconcileOutcome:
        """Réconciliation complète d'une PR."""
        pr = self._fetch_pr(pr_number)
        if pr is None:
            return ReconcileOutcome(
                pr_number=pr_number,
                trigger=trigger,
                skipped_reason="Statut de la PR indéterminé (mergeable_state resté unknown)",
            )

        if pr.draft:
            logger.info(f"PR #{pr_number} en draft : seul le label prêt-pour-revue est retiré")
            return self.reconciler.retract_ready_label(pr, trigger)

        result = self.aggregator.evaluate(pr_number)
        logger.info(
            f"PR #{pr_number} : needs_changes={result.needs_changes} "
            f"({result.reviews_considered} revue(s) prise(s) en compte)"
        )
        outcome = self.reconciler.reconcile(pr, result.needs_changes, trigger)
        self._log_outcome(outcome)
        return outcome

    def retract_ready_label(self, pr_number: int) -> ReconcileOutcome:
        """Chemin réduit de la conversion en draft."""
        pr = self.access.get_pull_request(pr_number)
        outcome = self.reconciler.retract_ready_label(pr, Trigger.CONVERTED_TO_DRAFT)
        self._log_outcome(outcome)
        return outcome

    def sweep_open_prs(self) -> list[ReconcileOutcome]:
        """Réconcilie toutes les PR ouvertes, une par une."""
        numbers = self.access.list_open_pull_requests()
        logger.info(f"{len(numbers)} PR ouverte(s) à réconcilier")
        return [self.update_pr(number) for number in numbers]

    # ── Helpers ─────────────────────────────

    def _fetch_pr(self, pr_number: int) -> PullRequest | None:
        if self._wait_for_merge_state:
            return self.access.get_stabilized_pull_request(
                pr_number,
                attempts=self._merge_state_attempts,
                backoff_ms=self._merge_state_backoff_ms,
            )
        return self.access.get_pull_request(pr_number)

    @staticmethod
    def _log_outcome(outcome: ReconcileOutcome) -> None:
        if outcome.api_calls == 0:
            logger.info(f"PR #{outcome.pr_number} : déjà à jour")
            return
        logger.info(
            f"PR #{outcome.pr_number} : +{outcome.labels_added} -{outcome.labels_removed}"
            f"{' + commentaire' if outcome.comment_posted else ''}"
        )
