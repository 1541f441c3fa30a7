"""
Classifieur d'événements — PR Needs Review.

Décide, à partir du payload d'un événement GitHub, si une réconciliation
doit avoir lieu et pour quelle PR. Aucun effet de bord.

  pull_request + review          → REVIEW_SUBMITTED (prioritaire sur action)
  pull_request, action opened    → OPENED
  pull_request, ready_for_review → READY_FOR_REVIEW
  pull_request, converted_to_draft → CONVERTED_TO_DRAFT (retrait du label seul)
  comment contenant la phrase    → BLESS_COMMENT
  tout le reste                  → SKIP
"""

from __future__ import annotations

import logging
from typing import Any

from pr_needs_review.models import LabelPolicy, RoutingDecision, Trigger
from pr_needs_review.utils.helpers import contains_phrase

logger = logging.getLogger("pr_needs_review.classifier")

_PR_ACTIONS = {
    "opened": Trigger.OPENED,
    "ready_for_review": Trigger.READY_FOR_REVIEW,
    "converted_to_draft": Trigger.CONVERTED_TO_DRAFT,
}


def classify(payload: dict[str, Any], policy: LabelPolicy) -> RoutingDecision:
    """Route un payload d'événement vers un déclencheur (ou SKIP)."""
    if "pull_request" in payload:
        decision = _classify_pull_request(payload)
    elif "comment" in payload:
        decision = _classify_comment(payload, policy)
    else:
        decision = _skip("Événement non reconnu")

    if decision.should_run:
        logger.info(f"Événement {decision.trigger.value} → PR #{decision.pr_number}")
    else:
        logger.info(f"Événement ignoré : {decision.reason}")
    return decision


def _classify_pull_request(payload: dict[str, Any]) -> RoutingDecision:
    number = _number_of(payload.get("pull_request"))
    if number is None:
        return _skip("pull_request sans numéro")

    if "review" in payload:
        return RoutingDecision(
            trigger=Trigger.REVIEW_SUBMITTED,
            pr_number=number,
            reason="Une revue a été postée sur la PR",
        )

    action = payload.get("action")
    trigger = _PR_ACTIONS.get(action) if isinstance(action, str) else None
    if trigger is None:
        return _skip(f"Action inattendue : {action}")

    reasons = {
        Trigger.OPENED: "La PR a été ouverte",
        Trigger.READY_FOR_REVIEW: "La PR est sortie de l'état draft",
        Trigger.CONVERTED_TO_DRAFT: "La PR est repassée en draft",
    }
    return RoutingDecision(trigger=trigger, pr_number=number, reason=reasons[trigger])


def _classify_comment(payload: dict[str, Any], policy: LabelPolicy) -> RoutingDecision:
    comment = payload.get("comment") or {}
    body = comment.get("body") if isinstance(comment, dict) else None
    if not contains_phrase(body, policy.bless_comment):
        return _skip("Commentaire sans rapport avec la PR")

    issue = payload.get("issue")
    if not isinstance(issue, dict) or "pull_request" not in issue:
        return _skip("Commentaire sur une issue qui n'est pas une PR")

    number = _number_of(issue)
    if number is None:
        return _skip("issue sans numéro")
    return RoutingDecision(
        trigger=Trigger.BLESS_COMMENT,
        pr_number=number,
        reason="Un commentaire « bless » a été posté sur la PR",
    )


def _number_of(obj: Any) -> int | None:
    if not isinstance(obj, dict):
        return None
    number = obj.get("number")
    if isinstance(number, bool) or not isinstance(number, int):
        return None
    return number


def _skip(reason: str) -> RoutingDecision:
    return RoutingDecision(trigger=Trigger.SKIP, reason=reason)
