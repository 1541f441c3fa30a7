"""
Client GitHub — PR Needs Review.

Implémentation de RepositoryAccess au-dessus de PyGithub pour :
- Lire une PR (draft, labels, reviewers demandés, merge state)
- Lister les revues et les commentaires d'issue
- Ajouter / retirer un label, poster un commentaire

Toute erreur HTTP (statut hors 200–299) ou réseau devient TransportFailure.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import requests
from github import Github, GithubException
from github.PullRequest import PullRequest as GithubPullRequest
from github.Repository import Repository

from pr_needs_review.config import Settings
from pr_needs_review.integrations.base import RepositoryAccess, TransportFailure
from pr_needs_review.models import Comment, PullRequest, Review, ReviewState

logger = logging.getLogger("pr_needs_review.github")


@contextmanager
def _transport(operation: str) -> Iterator[None]:
    """Traduit les exceptions PyGithub / requests en TransportFailure."""
    try:
        yield
    except GithubException as exc:
        message = ""
        if isinstance(exc.data, dict):
            message = str(exc.data.get("message", ""))
        logger.error(f"{operation} : réponse GitHub {exc.status} {message}")
        raise TransportFailure(operation, exc.status, message) from exc
    except requests.RequestException as exc:
        logger.error(f"{operation} : erreur réseau {exc}")
        raise TransportFailure(operation, None, str(exc)) from exc


class GitHubClient(RepositoryAccess):
    """Wrapper autour de PyGithub, limité à un seul dépôt."""

    name = "github"

    def __init__(self, token: str, repo_name: str, base_url: str = "https://api.github.com"):
        if not token:
            raise ValueError("GITHUB_TOKEN non configuré.")
        if not repo_name:
            raise ValueError("Dépôt GitHub (owner/repo) non configuré.")
        self.repo_name = repo_name
        self._gh = Github(token, base_url=base_url)
        self._repo: Repository | None = None
        self._pulls: dict[int, GithubPullRequest] = {}

    @classmethod
    def from_settings(cls, settings: Settings, repo_name: str | None = None) -> GitHubClient:
        return cls(
            token=settings.github_token,
            repo_name=repo_name or settings.github_repository,
            base_url=settings.github_api_url,
        )

    # ── Helpers ─────────────────────────────

    def _get_repo(self) -> Repository:
        if self._repo is None:
            with _transport(f"GET repo {self.repo_name}"):
                self._repo = self._gh.get_repo(self.repo_name)
        return self._repo

    def _fetch_pull(self, number: int) -> GithubPullRequest:
        repo = self._get_repo()
        with _transport(f"GET pull #{number}"):
            pr = repo.get_pull(number)
        self._pulls[number] = pr
        return pr

    def _pull(self, number: int) -> GithubPullRequest:
        """PR PyGithub déjà lue, sinon un seul GET."""
        # Revues, commentaires et écritures passent par des sous-ressources de son URL
        if number in self._pulls:
            return self._pulls[number]
        return self._fetch_pull(number)

    # ── Lecture ─────────────────────────────

    def get_pull_request(self, number: int) -> PullRequest:
        """Récupère un instantané frais de la PR."""
        logger.debug(f"Lecture de la PR {self.repo_name}#{number}")
        pr = self._fetch_pull(number)
        with _transport(f"GET pull #{number}"):
            return PullRequest(
                number=pr.number,
                draft=bool(pr.draft),
                labels={label.name for label in pr.labels},
                requested_reviewers={user.login for user in pr.requested_reviewers},
                mergeable_state=pr.mergeable_state,
            )

    def list_reviews(self, number: int) -> list[Review]:
        pr = self._pull(number)
        reviews: list[Review] = []
        with _transport(f"GET reviews #{number}"):
            for review in pr.get_reviews():
                reviews.append(
                    Review(
                        author=review.user.login if review.user else "ghost",
                        state=ReviewState.from_github(review.state),
                        submitted_at=review.submitted_at,
                    )
                )
        logger.debug(f"La PR #{number} a {len(reviews)} revue(s)")
        return reviews

    def list_requested_reviewers(self, number: int) -> set[str]:
        pr = self._pull(number)
        with _transport(f"GET requested reviewers #{number}"):
            users, _teams = pr.get_review_requests()
            return {user.login for user in users}

    def list_issue_comments(self, number: int) -> list[Comment]:
        pr = self._pull(number)
        comments: list[Comment] = []
        with _transport(f"GET comments #{number}"):
            for comment in pr.get_issue_comments():
                comments.append(
                    Comment(
                        id=comment.id,
                        author=comment.user.login if comment.user else "ghost",
                        body=comment.body or "",
                        updated_at=comment.updated_at,
                    )
                )
        logger.debug(f"{len(comments)} commentaire(s) récupéré(s) sur la PR #{number}")
        return comments

    def list_open_pull_requests(self) -> list[int]:
        repo = self._get_repo()
        with _transport("GET open pulls"):
            return [pr.number for pr in repo.get_pulls(state="open")]

    # ── Écriture ────────────────────────────

    def add_label(self, number: int, label: str) -> None:
        logger.info(f"Ajout du label {label} sur {self.repo_name}#{number}")
        pr = self._pull(number)
        with _transport(f"POST label {label} #{number}"):
            pr.add_to_labels(label)

    def remove_label(self, number: int, label: str) -> None:
        logger.info(f"Retrait du label {label} de {self.repo_name}#{number}")
        pr = self._pull(number)
        with _transport(f"DELETE label {label} #{number}"):
            pr.remove_from_labels(label)

    def create_comment(self, number: int, body: str) -> None:
        pr = self._pull(number)
        with _transport(f"POST comment #{number}"):
            pr.create_issue_comment(body)
        logger.info(f"Commentaire posté sur {self.repo_name}#{number}")
