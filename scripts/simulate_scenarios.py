#!/usr/bin/env python3
"""
🧪 Simulation locale de PR Needs Review.

Rejoue des scénarios complets SANS appeler l'API GitHub :
  - Dépôt en mémoire (InMemoryRepository)
  - Événements webhook fictifs passés au Labeler
  - Affichage des labels après chaque étape

Usage :
  python scripts/simulate_scenarios.py
  python scripts/simulate_scenarios.py --scenario bless
  python scripts/simulate_scenarios.py --scenario draft
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

# Ajouter le projet au path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pr_needs_review.config import Settings
from pr_needs_review.integrations.memory_client import InMemoryRepository
from pr_needs_review.models import ReviewState
from pr_needs_review.orchestrator import Labeler

console = Console()

PR = 42


# ════════════════════════════════════════════
#  ÉVÉNEMENTS FICTIFS
# ════════════════════════════════════════════

def pr_event(action: str, draft: bool = False) -> dict:
    return {"action": action, "pull_request": {"number": PR, "draft": draft, "labels": []}}


def review_event(state: str) -> dict:
    return {
        "action": "submitted",
        "pull_request": {"number": PR, "draft": False, "labels": []},
        "review": {"state": state, "user": {"login": "reviewer-alice"}},
    }


def comment_event(body: str) -> dict:
    return {
        "action": "created",
        "issue": {"number": PR, "labels": [], "pull_request": {}},
        "comment": {"body": body},
    }


# ════════════════════════════════════════════
#  SCÉNARIOS
# ════════════════════════════════════════════

def run_bless_scenario(repo: InMemoryRepository, labeler: Labeler, table: Table) -> None:
    bless = labeler.policy.bless_comment

    repo.open_pull_request(PR)
    _step(repo, labeler, table, "PR ouverte", pr_event("opened"))

    repo.submit_review(PR, "reviewer-alice", ReviewState.CHANGES_REQUESTED)
    _step(repo, labeler, table, "Alice demande des changements", review_event("changes_requested"))
    _step(repo, labeler, table, "Rejeu (idempotence)", review_event("changes_requested"))

    repo.post_comment(PR, "Merci, je regarde.", author="dev-bob")
    _step(repo, labeler, table, "Commentaire sans rapport", comment_event("Merci, je regarde."))

    repo.post_comment(PR, bless, author="dev-bob")
    _step(repo, labeler, table, "Bob bénit la PR", comment_event(bless))

    repo.submit_review(PR, "reviewer-alice", ReviewState.CHANGES_REQUESTED)
    _step(repo, labeler, table, "Nouvelle demande de changements", review_event("changes_requested"))


def run_draft_scenario(repo: InMemoryRepository, labeler: Labeler, table: Table) -> None:
    repo.open_pull_request(PR, draft=True)
    _step(repo, labeler, table, "PR draft ouverte", pr_event("opened", draft=True))

    repo.set_draft(PR, False)
    _step(repo, labeler, table, "PR prête pour revue", pr_event("ready_for_review"))

    repo.set_draft(PR, True)
    _step(repo, labeler, table, "PR repassée en draft", pr_event("converted_to_draft", draft=True))


SCENARIOS = {
    "bless": run_bless_scenario,
    "draft": run_draft_scenario,
}


def _step(repo: InMemoryRepository, labeler: Labeler, table: Table, title: str, event: dict) -> None:
    before = len(repo.calls)
    outcome = labeler.handle_event(event)
    calls = repo.calls[before:]
    table.add_row(
        title,
        outcome.trigger.value,
        ", ".join(sorted(repo.labels_of(PR))) or "[dim]aucun[/]",
        str(len(calls)),
        "💬" if outcome.comment_posted else "",
    )


def run_simulation(name: str) -> None:
    repo = InMemoryRepository()
    labeler = Labeler(repo, Settings(github_token="simulation").label_policy())

    table = Table(title=f"🧪 Scénario « {name} » — PR #{PR}")
    table.add_column("Étape", style="cyan")
    table.add_column("Déclencheur")
    table.add_column("Labels")
    table.add_column("Appels", justify="right")
    table.add_column("Commentaire", justify="center")

    SCENARIOS[name](repo, labeler, table)
    console.print(table)
    console.print()


# ════════════════════════════════════════════
#  CLI
# ════════════════════════════════════════════

@click.command()
@click.option(
    "--scenario", "-s",
    type=click.Choice([*SCENARIOS, "all"]),
    default="all",
    help="Scénario à simuler (bless, draft, ou all)",
)
def main(scenario: str):
    """🧪 Simule PR Needs Review en local sans API."""
    names = list(SCENARIOS) if scenario == "all" else [scenario]
    for name in names:
        run_simulation(name)


if __name__ == "__main__":
    main()
