"""Tests du classifieur d'événements."""

from pr_needs_review.classifier import classify
from pr_needs_review.models import Trigger


class TestClassify:
    """Tests pour classify()."""

    def test_opened(self, policy, opened_event):
        decision = classify(opened_event, policy)

        assert decision.trigger == Trigger.OPENED
        assert decision.pr_number == 42
        assert decision.should_run

    def test_ready_for_review(self, policy):
        payload = {"action": "ready_for_review", "pull_request": {"number": 7}}

        decision = classify(payload, policy)

        assert decision.trigger == Trigger.READY_FOR_REVIEW
        assert decision.pr_number == 7

    def test_converted_to_draft(self, policy):
        payload = {"action": "converted_to_draft", "pull_request": {"number": 7, "draft": True}}

        decision = classify(payload, policy)

        assert decision.trigger == Trigger.CONVERTED_TO_DRAFT

    def test_review_takes_precedence_over_action(self, policy, review_event):
        """Vérifie qu'une revue l'emporte sur le champ action."""
        review_event["action"] = "opened"

        decision = classify(review_event, policy)

        assert decision.trigger == Trigger.REVIEW_SUBMITTED
        assert decision.pr_number == 42

    def test_unknown_pr_action_is_skipped(self, policy):
        payload = {"action": "synchronize", "pull_request": {"number": 7}}

        decision = classify(payload, policy)

        assert decision.trigger == Trigger.SKIP
        assert not decision.should_run
        assert "synchronize" in decision.reason

    def test_pull_request_without_number_is_skipped(self, policy):
        decision = classify({"action": "opened", "pull_request": {}}, policy)

        assert not decision.should_run

    def test_bless_comment_is_case_insensitive(self, policy, bless_event):
        decision = classify(bless_event, policy)

        assert decision.trigger == Trigger.BLESS_COMMENT
        assert decision.pr_number == 42

    def test_unrelated_comment_is_skipped(self, policy, bless_event):
        bless_event["comment"]["body"] = "LGTM, merci !"

        decision = classify(bless_event, policy)

        assert decision.trigger == Trigger.SKIP

    def test_comment_on_plain_issue_is_skipped(self, policy, bless_event):
        """Vérifie qu'un commentaire sur une issue (pas une PR) est ignoré."""
        del bless_event["issue"]["pull_request"]

        decision = classify(bless_event, policy)

        assert decision.trigger == Trigger.SKIP

    def test_comment_with_null_body_is_skipped(self, policy, bless_event):
        bless_event["comment"]["body"] = None

        assert not classify(bless_event, policy).should_run

    def test_unrecognized_payload_is_skipped(self, policy):
        decision = classify({"action": "push", "ref": "refs/heads/main"}, policy)

        assert decision.trigger == Trigger.SKIP
        assert decision.pr_number is None
