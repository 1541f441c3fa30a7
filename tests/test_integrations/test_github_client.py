"""Tests du client GitHub (PyGithub mocké)."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests
from github import GithubException

from pr_needs_review.config import Settings
from pr_needs_review.integrations.base import TransportFailure
from pr_needs_review.integrations.github_client import GitHubClient
from pr_needs_review.models import ReviewState

WHEN = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _named(name: str) -> MagicMock:
    obj = MagicMock()
    obj.name = name
    return obj


def _user(login: str) -> MagicMock:
    user = MagicMock()
    user.login = login
    return user


@pytest.fixture
def gh_pull() -> MagicMock:
    pr = MagicMock()
    pr.number = 42
    pr.draft = False
    pr.labels = [_named("awaiting-review"), _named("bug")]
    pr.requested_reviewers = [_user("carol")]
    pr.get_review_requests.return_value = ([_user("carol")], [])
    pr.mergeable_state = "clean"
    return pr


@pytest.fixture
def client(gh_pull):
    with patch("pr_needs_review.integrations.github_client.Github") as mock_github:
        mock_github.return_value.get_repo.return_value.get_pull.return_value = gh_pull
        yield GitHubClient("token", "Team7/projet")


class TestGitHubClient:
    """Tests pour GitHubClient."""

    def test_requires_token(self):
        with pytest.raises(ValueError):
            GitHubClient("", "Team7/projet")

    def test_requires_repo(self):
        with pytest.raises(ValueError):
            GitHubClient("token", "")

    def test_from_settings(self):
        settings = Settings(
            github_token="tok",
            github_repository="Team7/projet",
            github_api_url="https://api.github.com",
        )
        with patch("pr_needs_review.integrations.github_client.Github") as mock_github:
            client = GitHubClient.from_settings(settings)

        assert client.repo_name == "Team7/projet"
        mock_github.assert_called_once_with("tok", base_url="https://api.github.com")

    def test_get_pull_request(self, client):
        pr = client.get_pull_request(42)

        assert pr.number == 42
        assert pr.draft is False
        assert pr.labels == {"awaiting-review", "bug"}
        assert pr.requested_reviewers == {"carol"}
        assert pr.mergeable_state == "clean"

    def test_list_reviews_keeps_source_order(self, client, gh_pull):
        first = MagicMock(user=_user("alice"), state="CHANGES_REQUESTED", submitted_at=WHEN)
        second = MagicMock(user=_user("alice"), state="DISMISSED", submitted_at=WHEN)
        ghost = MagicMock(user=None, state="commented", submitted_at=None)
        gh_pull.get_reviews.return_value = [first, second, ghost]

        reviews = client.list_reviews(42)

        assert [r.state for r in reviews] == [
            ReviewState.CHANGES_REQUESTED,
            ReviewState.OTHER,
            ReviewState.COMMENTED,
        ]
        assert reviews[2].author == "ghost"
        assert reviews[0].submitted_at == WHEN

    def test_list_requested_reviewers(self, client, gh_pull):
        gh_pull.get_review_requests.return_value = ([_user("carol"), _user("dave")], [])

        assert client.list_requested_reviewers(42) == {"carol", "dave"}

    def test_list_issue_comments(self, client, gh_pull):
        comment = MagicMock(id=7, user=_user("bob"), body=None, updated_at=WHEN)
        gh_pull.get_issue_comments.return_value = [comment]

        comments = client.list_issue_comments(42)

        assert comments[0].id == 7
        assert comments[0].body == ""
        assert comments[0].updated_at == WHEN

    def test_label_and_comment_writes(self, client, gh_pull):
        client.add_label(42, "awaiting-changes")
        client.remove_label(42, "awaiting-review")
        client.create_comment(42, "hello")

        gh_pull.add_to_labels.assert_called_once_with("awaiting-changes")
        gh_pull.remove_from_labels.assert_called_once_with("awaiting-review")
        gh_pull.create_issue_comment.assert_called_once_with("hello")

    def test_pull_fetched_once_per_reconciliation(self, client):
        get_pull = client._get_repo().get_pull

        client.get_pull_request(42)
        client.list_reviews(42)
        client.list_requested_reviewers(42)
        client.list_issue_comments(42)
        client.add_label(42, "awaiting-changes")
        client.remove_label(42, "awaiting-review")
        client.create_comment(42, "hello")

        get_pull.assert_called_once_with(42)

    def test_get_pull_request_always_reads_fresh(self, client):
        get_pull = client._get_repo().get_pull

        client.get_pull_request(42)
        client.get_pull_request(42)

        assert get_pull.call_count == 2

    def test_write_without_prior_read_fetches_once(self, client, gh_pull):
        get_pull = client._get_repo().get_pull

        client.add_label(42, "awaiting-review")
        client.create_comment(42, "hello")

        get_pull.assert_called_once_with(42)
        gh_pull.add_to_labels.assert_called_once_with("awaiting-review")

    def test_http_error_becomes_transport_failure(self, client, gh_pull):
        gh_pull.add_to_labels.side_effect = GithubException(403, {"message": "Forbidden"}, None)

        with pytest.raises(TransportFailure) as exc_info:
            client.add_label(42, "awaiting-changes")

        assert exc_info.value.status == 403
        assert exc_info.value.message == "Forbidden"

    def test_network_error_becomes_transport_failure(self, client, gh_pull):
        gh_pull.get_issue_comments.side_effect = requests.ConnectionError("boom")

        with pytest.raises(TransportFailure) as exc_info:
            client.list_issue_comments(42)

        assert exc_info.value.status is None

    def test_list_open_pull_requests(self):
        with patch("pr_needs_review.integrations.github_client.Github") as mock_github:
            repo = mock_github.return_value.get_repo.return_value
            repo.get_pulls.return_value = [MagicMock(number=3), MagicMock(number=5)]
            client = GitHubClient("token", "Team7/projet")

            assert client.list_open_pull_requests() == [3, 5]
            repo.get_pulls.assert_called_once_with(state="open")
