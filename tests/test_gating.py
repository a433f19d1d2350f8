"""Tests for the reasoning gate."""

import pytest

from awareos.orchestrator import IMPORTANT_TOPICS, evaluate_event


class TestEvaluateEvent:
    """Tests for evaluate_event()."""

    @pytest.mark.parametrize("topic", sorted(IMPORTANT_TOPICS))
    def test_important_topics_pass(self, topic):
        """Test that allow-listed topics pass regardless of payload."""
        assert evaluate_event(topic, {}) is True

    def test_unimportant_topic_fails(self):
        """Test that other topics with plain payloads are filtered."""
        assert evaluate_event("app_opened", {"app": "notes"}) is False

    def test_high_priority_payload_passes(self):
        """Test that priority=high promotes any topic."""
        assert evaluate_event("app_opened", {"priority": "high"}) is True

    def test_other_priority_fails(self):
        """Test that non-high priority does not promote."""
        assert evaluate_event("app_opened", {"priority": "medium"}) is False

    def test_needs_attention_payload_passes(self):
        """Test that a truthy needsAttention promotes any topic."""
        assert evaluate_event("todo_task_updated", {"needsAttention": True}) is True
        assert evaluate_event("todo_task_updated", {"needsAttention": False}) is False

    @pytest.mark.parametrize("payload", [None, "high", ["priority", "high"], 42])
    def test_non_dict_payload(self, payload):
        """Test that non-object payloads are only gated by topic."""
        assert evaluate_event("app_opened", payload) is False
        assert evaluate_event("message_received", payload) is True
