"""Tests de la configuration."""

import pytest

from pr_needs_review.config import DEFAULT_BLESS_COMMENT, Settings
from pr_needs_review.models import LabelPolicy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "GITHUB_TOKEN", "INPUT_TOKEN", "VERBOSE", "INPUT_VERBOSE",
        "READY_FOR_REVIEW_LABEL", "NEEDS_CHANGES_LABEL", "LOG_LEVEL", "GITHUB_EVENT_PATH",
    ):
        monkeypatch.delenv(var, raising=False)


class TestSettings:
    """Tests pour Settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.ready_for_review_label == "awaiting-review"
        assert settings.needs_changes_label == "awaiting-changes"
        assert settings.bless_comment == DEFAULT_BLESS_COMMENT
        assert f"`{DEFAULT_BLESS_COMMENT}`" in settings.needs_changes_comment
        assert "\n" not in settings.needs_changes_comment
        assert settings.wait_for_merge_state is False

    def test_action_inputs(self, monkeypatch):
        monkeypatch.setenv("INPUT_TOKEN", "ghs_abc")
        monkeypatch.setenv("INPUT_VERBOSE", "true")

        settings = Settings()

        assert settings.github_token == "ghs_abc"
        assert settings.effective_log_level == "DEBUG"

    def test_label_policy_from_env(self, monkeypatch):
        monkeypatch.setenv("READY_FOR_REVIEW_LABEL", "rfr")
        monkeypatch.setenv("NEEDS_CHANGES_LABEL", "nc")

        policy = Settings().label_policy()

        assert isinstance(policy, LabelPolicy)
        assert policy.ready_for_review_label == "rfr"
        assert policy.needs_changes_label == "nc"

    def test_log_level_without_verbose(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        assert Settings().effective_log_level == "WARNING"

    def test_event_path_from_actions_runner(self, monkeypatch):
        monkeypatch.setenv("GITHUB_EVENT_PATH", "/home/runner/work/_temp/_github_workflow/event.json")

        assert Settings().github_event_path.endswith("event.json")
