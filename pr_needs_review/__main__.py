"""
Point d'entrée CLI & Webhook — PR Needs Review.

Modes :
  - PR       : python -m pr_needs_review --repo owner/repo --pr 42
  - Action   : python -m pr_needs_review --event-path $GITHUB_EVENT_PATH
  - Balayage : python -m pr_needs_review --repo owner/repo --all
  - Server   : python -m pr_needs_review --server --port 8080
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pr_needs_review.config import Settings, get_settings
from pr_needs_review.integrations.base import TransportFailure
from pr_needs_review.integrations.github_client import GitHubClient
from pr_needs_review.models import ReconcileOutcome
from pr_needs_review.orchestrator import Labeler
from pr_needs_review.utils.helpers import truncate
from pr_needs_review.utils.logger import setup_logging

console = Console()


# ════════════════════════════════════════════
#  CLI
# ════════════════════════════════════════════

@click.command()
@click.option("--repo", "-r", help="Repository (owner/repo)", required=False)
@click.option("--pr", "-p", "pr_number", type=int, help="Numéro de la PR", required=False)
@click.option(
    "--event-path", "-e",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Payload JSON de l'événement (GitHub Actions, défaut : GITHUB_EVENT_PATH)",
)
@click.option("--all", "sweep", is_flag=True, help="Réconcilier toutes les PR ouvertes")
@click.option("--server", is_flag=True, help="Lancer le serveur webhook")
@click.option("--port", default=8080, type=int, help="Port du serveur webhook")
@click.option("--json-output", is_flag=True, help="Sortie JSON brute")
@click.option("--verbose", "-v", is_flag=True, help="Logs détaillés (DEBUG)")
def main(repo: str | None, pr_number: int | None, event_path: Path | None,
         sweep: bool, server: bool, port: int, json_output: bool, verbose: bool) -> None:
    """🏷️ PR Needs Review — Labels awaiting-review / awaiting-changes."""
    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.effective_log_level)

    if server:
        _run_server(settings, port)
        return

    if event_path is None and settings.github_event_path:
        event_path = Path(settings.github_event_path)

    payload = None
    if not (pr_number or sweep) and event_path:
        payload = _read_event(event_path)

    repo = repo or _repository_of(payload) or settings.github_repository
    if not repo or not (pr_number or sweep or payload is not None):
        console.print(
            Panel(
                "[bold red]Paramètres manquants.[/]\n\n"
                "Usage :\n"
                "  python -m pr_needs_review --repo owner/repo --pr 42\n"
                "  python -m pr_needs_review --repo owner/repo --all\n"
                "  python -m pr_needs_review --event-path event.json\n"
                "  python -m pr_needs_review --server --port 8080",
                title="🏷️ PR Needs Review",
            )
        )
        sys.exit(1)

    try:
        labeler = _build_labeler(settings, repo)
        if pr_number:
            outcomes = [labeler.update_pr(pr_number)]
        elif sweep:
            outcomes = labeler.sweep_open_prs()
        else:
            outcomes = [labeler.handle_event(payload)]
    except TransportFailure as exc:
        console.print(f"[bold red]Échec de la réconciliation :[/] {exc}")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[bold red]Configuration invalide :[/] {exc}")
        sys.exit(1)

    if json_output:
        console.print_json(json.dumps([o.model_dump(mode="json") for o in outcomes]))
    else:
        _display_outcomes(repo, outcomes)


def _read_event(event_path: Path) -> dict:
    """Lit le payload d'événement ; sortie en erreur s'il est illisible."""
    try:
        payload = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        console.print(f"[bold red]Payload d'événement illisible ({event_path}) :[/] {exc}")
        sys.exit(1)
    if not isinstance(payload, dict):
        console.print(f"[bold red]Payload d'événement invalide ({event_path}) :[/] objet JSON attendu")
        sys.exit(1)
    return payload


def _repository_of(payload: dict | None) -> str:
    repository = (payload or {}).get("repository")
    if isinstance(repository, dict):
        return repository.get("full_name") or ""
    return ""


def _build_labeler(settings: Settings, repo: str) -> Labeler:
    return Labeler(
        GitHubClient.from_settings(settings, repo),
        settings.label_policy(),
        wait_for_merge_state=settings.wait_for_merge_state,
        merge_state_attempts=settings.merge_state_attempts,
        merge_state_backoff_ms=settings.merge_state_backoff_ms,
    )


def _display_outcomes(repo: str, outcomes: list[ReconcileOutcome]) -> None:
    """Affiche le résultat de chaque réconciliation en mode Rich."""
    table = Table(title=f"🏷️ {repo}")
    table.add_column("PR", justify="right", style="cyan")
    table.add_column("Déclencheur")
    table.add_column("Verdict", justify="center")
    table.add_column("Actions")

    for outcome in outcomes:
        if outcome.skipped:
            verdict = "[yellow]ignorée[/]"
            actions = truncate(outcome.skipped_reason, 60)
        else:
            if outcome.needs_changes is None:
                verdict = "[dim]draft[/]"
            elif outcome.needs_changes:
                verdict = "[red]awaiting-changes[/]"
            else:
                verdict = "[green]awaiting-review[/]"
            parts = [f"+{label}" for label in outcome.labels_added]
            parts += [f"-{label}" for label in outcome.labels_removed]
            if outcome.comment_posted:
                parts.append("💬 commentaire")
            actions = ", ".join(parts) or "[dim]déjà à jour[/]"
        table.add_row(
            f"#{outcome.pr_number}" if outcome.pr_number else "—",
            outcome.trigger.value,
            verdict,
            actions,
        )
    console.print(table)


# ════════════════════════════════════════════
#  WEBHOOK SERVER (FastAPI)
# ════════════════════════════════════════════

def _run_server(settings: Settings, port: int) -> None:
    """Lance le serveur FastAPI pour recevoir les webhooks GitHub."""
    import uvicorn

    from pr_needs_review.webhook import create_app

    console.print(Panel(
        f"[bold green]Serveur webhook démarré sur le port {port}[/]\n"
        "En attente d'événements GitHub…",
        title="🏷️ PR Needs Review Server",
    ))
    app = create_app(settings)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    main()
