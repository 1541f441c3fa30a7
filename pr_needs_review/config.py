"""
Configuration centralisée — PR Needs Review.

Charge les variables d'environnement depuis .env (ou les inputs d'une
GitHub Action) et expose un objet Settings validé via Pydantic.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from pr_needs_review.models import LabelPolicy

# ── Racine du projet ────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Charger .env ────────────────────────────
_env_path = PROJECT_ROOT / ".env"

DEFAULT_BLESS_COMMENT = "I have made the requested changes; please review again"
DEFAULT_NEEDS_CHANGES_COMMENT = (
    "Your PR has received a review that is requesting changes.  Please make the changes requested."
    " Once you have done this please leave a comment on this pull request containing the phrase"
    f" `{DEFAULT_BLESS_COMMENT}`.  This will relabel the pull"
    " request to let reviewers know the changes have been completed."
)


class Settings(BaseSettings):
    """Paramètres globaux chargés depuis les variables d'environnement."""

    # GitHub
    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("github_token", "input_token"),
        description="GitHub personal access token",
    )
    github_api_url: str = Field(default="https://api.github.com")
    github_repository: str = Field(default="", description="owner/repo")
    github_event_path: str = Field(default="", description="Payload JSON d'une GitHub Action")

    # Labels & commentaires
    ready_for_review_label: str = Field(default="awaiting-review")
    needs_changes_label: str = Field(default="awaiting-changes")
    bless_comment: str = Field(default=DEFAULT_BLESS_COMMENT)
    needs_changes_comment: str = Field(default=DEFAULT_NEEDS_CHANGES_COMMENT)

    # Attente de stabilisation du merge state (désactivée par défaut)
    wait_for_merge_state: bool = Field(default=False)
    merge_state_attempts: int = Field(default=5, ge=1)
    merge_state_backoff_ms: int = Field(default=30, ge=0)

    # Général
    log_level: str = Field(default="INFO")
    verbose: bool = Field(
        default=False,
        validation_alias=AliasChoices("verbose", "input_verbose"),
    )

    model_config = {
        "env_file": str(_env_path),
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # ── Helpers ──────────────────────────────

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level.upper()

    def label_policy(self) -> LabelPolicy:
        """Construit la politique de labellisation injectée dans le cœur."""
        return LabelPolicy(
            ready_for_review_label=self.ready_for_review_label,
            needs_changes_label=self.needs_changes_label,
            bless_comment=self.bless_comment,
            needs_changes_comment=self.needs_changes_comment,
        )


def get_settings() -> Settings:
    """Retourne une instance Settings fraîche."""
    return Settings()
