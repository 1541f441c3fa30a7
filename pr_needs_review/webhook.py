"""
Webhook Server — PR Needs Review.

Reçoit les webhooks GitHub (pull_request, pull_request_review,
issue_comment) et réconcilie les labels de la PR concernée.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from pr_needs_review import __version__
from pr_needs_review.classifier import classify
from pr_needs_review.config import Settings, get_settings
from pr_needs_review.integrations.base import TransportFailure
from pr_needs_review.integrations.github_client import GitHubClient
from pr_needs_review.orchestrator import Labeler

logger = logging.getLogger("pr_needs_review.webhook")

LabelerFactory = Callable[[str], Labeler]


def default_labeler_factory(settings: Settings) -> LabelerFactory:
    """Construit un Labeler GitHub pour le dépôt de l'événement."""

    def build(repo_name: str) -> Labeler:
        return Labeler(
            GitHubClient.from_settings(settings, repo_name),
            settings.label_policy(),
            wait_for_merge_state=settings.wait_for_merge_state,
            merge_state_attempts=settings.merge_state_attempts,
            merge_state_backoff_ms=settings.merge_state_backoff_ms,
        )

    return build


def create_app(
    settings: Settings | None = None,
    labeler_factory: LabelerFactory | None = None,
) -> FastAPI:
    """Crée et configure l'application FastAPI."""
    settings = settings or get_settings()
    factory = labeler_factory or default_labeler_factory(settings)
    policy = settings.label_policy()

    app = FastAPI(
        title="PR Needs Review",
        description="Webhook receiver for GitHub pull request labeling",
        version=__version__,
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "pr-needs-review"}

    @app.post("/webhook/github")
    async def github_webhook(request: Request):
        """Endpoint pour les webhooks GitHub."""
        body = await request.body()
        try:
            payload: dict[str, Any] = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=400, detail="Payload JSON invalide.")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Payload JSON invalide.")

        repository = payload.get("repository") or {}
        if not isinstance(repository, dict):
            raise HTTPException(status_code=400, detail="Payload incomplet : dépôt invalide.")

        event = request.headers.get("X-GitHub-Event", "")
        decision = classify(payload, policy)
        if not decision.should_run:
            return JSONResponse({"message": f"Événement ignoré : {decision.reason}"})

        repo_name = repository.get("full_name") or settings.github_repository
        if not repo_name:
            raise HTTPException(status_code=400, detail="Payload incomplet : dépôt inconnu.")

        logger.info(f"Webhook reçu : {event or '?'} sur {repo_name}")

        try:
            labeler = factory(repo_name)
        except ValueError as exc:
            logger.error(f"Configuration invalide pour {repo_name} : {exc}")
            raise HTTPException(status_code=503, detail=f"Service non configuré : {exc}")

        try:
            outcome = await run_in_threadpool(labeler.dispatch, decision)
        except TransportFailure as exc:
            logger.error(f"Réconciliation échouée sur {repo_name} : {exc}")
            raise HTTPException(status_code=502, detail=str(exc))

        if outcome.skipped:
            return JSONResponse({"message": f"Événement ignoré : {outcome.skipped_reason}"})

        return JSONResponse({
            "message": "PR réconciliée.",
            "repo": repo_name,
            "outcome": outcome.model_dump(mode="json"),
        })

    return app
