"""Tests for content moderation and issue triage."""

import pytest

from campuslink.services.moderation_service import (
    ContentRejectedError,
    IssueTriageService,
    ModerationService,
    fallback_triage,
    validate_moderation,
    validate_triage,
)


class TestValidateModeration:

    def test_safe_verdict(self):
        assert validate_moderation({"safe": True, "reason": "ignored", "severity": "LOW"}) == {
            "safe": True, "reason": "", "severity": "low"
        }

    def test_missing_safe_key_is_safe(self):
        assert validate_moderation({})["safe"] is True

    def test_string_booleans(self):
        assert validate_moderation({"safe": "false"})["safe"] is False
        assert validate_moderation({"safe": "true"})["safe"] is True

    def test_unsafe_without_reason(self):
        verdict = validate_moderation({"safe": False})
        assert verdict["reason"] == "Content flagged by moderation"
        assert verdict["severity"] == "medium"

    def test_unknown_severity(self):
        assert validate_moderation({"safe": False, "reason": "Abuse", "severity": "extreme"})["severity"] == "medium"


class TestValidateTriage:

    def test_normalizes_fields(self):
        result = validate_triage(
            {"category": "hygiene", "priority": "high", "tags": [" Washroom ", "", "Smell"], "summary": "Dirty"},
            "The washroom is dirty"
        )
        assert result == {
            "category": "Hygiene",
            "priority": "High",
            "tags": ["washroom", "smell"],
            "summary": "Dirty",
            "source": "ai"
        }

    def test_unknown_values_use_defaults(self):
        result = validate_triage({"category": "Parking", "priority": "ASAP", "tags": "bad"}, "x" * 150)
        assert result["category"] == "Infrastructure"
        assert result["priority"] == "Medium"
        assert result["tags"] == []
        assert result["summary"] == "x" * 100

    def test_tag_limit(self):
        result = validate_triage({"tags": [f"t{i}" for i in range(12)]}, "desc")
        assert len(result["tags"]) == 8

    def test_fallback_triage(self):
        result = fallback_triage("Broken bench", "uncategorized")
        assert result["tags"] == ["uncategorized"]
        assert result["summary"] == "Broken bench"
        assert result["source"] == "fallback"


class TestModerationService:

    def test_safe_content(self, fake_ai):
        verdict = ModerationService().check("Can you help me with calculus?", "chat message")
        assert verdict["safe"] is True
        assert fake_ai.calls_of("moderation") == ["Can you help me with calculus?"]

    def test_unsafe_content_rejected(self, fake_ai):
        fake_ai.replies["moderation"] = '{"safe": false, "reason": "Harassment", "severity": "high"}'
        with pytest.raises(ContentRejectedError) as exc:
            ModerationService().ensure_safe("you are useless", "chat message")
        assert exc.value.reason == "Harassment"
        assert exc.value.severity == "high"

    def test_fails_open_when_offline(self, fake_ai):
        fake_ai.offline.add("moderation")
        verdict = ModerationService().ensure_safe("anything")
        assert verdict == {"safe": True, "reason": "Moderation check failed", "severity": "low"}

    def test_unparseable_reply_is_safe(self, fake_ai):
        fake_ai.replies["moderation"] = "Looks fine to me"
        verdict = ModerationService().check("anything")
        assert verdict == {"safe": True, "reason": "", "severity": "low"}

    def test_broken_json_counts_as_failure(self, fake_ai):
        fake_ai.replies["moderation"] = '{"safe": false,,}'
        verdict = ModerationService().check("anything")
        assert verdict == {"safe": True, "reason": "Moderation check failed", "severity": "low"}


class TestIssueTriageService:

    def test_ai_triage(self):
        result = IssueTriageService().categorize("Street light out near library")
        assert result["category"] == "Safety"
        assert result["priority"] == "High"
        assert result["tags"] == ["lighting", "night"]
        assert result["source"] == "ai"

    def test_unparseable_reply(self, fake_ai):
        fake_ai.replies["triage"] = "Probably infrastructure?"
        result = IssueTriageService().categorize("Leaking roof in block B")
        assert result["tags"] == ["general"]
        assert result["category"] == "Infrastructure"
        assert result["priority"] == "Medium"

    def test_broken_json_reply(self, fake_ai):
        fake_ai.replies["triage"] = '{"category": }'
        result = IssueTriageService().categorize("Leaking roof in block B")
        assert result["tags"] == ["uncategorized"]
        assert result["source"] == "fallback"

    def test_ai_offline(self, fake_ai):
        fake_ai.offline.add("triage")
        result = IssueTriageService().categorize("Leaking roof in block B")
        assert result["tags"] == ["uncategorized"]
        assert result["summary"] == "Leaking roof in block B"
