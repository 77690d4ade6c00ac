"""
Moderation & Triage Service - AI checks on user-written text.

PURPOSE:
1. Moderation: issue descriptions, mentor requests and chat messages are
   screened before they are stored.
2. Triage: issue reports get an AI-suggested category, priority, tags and
   a one-line summary for the admin queue.

FAILURE POLICY:
- Moderation fails OPEN: if the AI is down, the content goes through and
  the failure is logged.
- Triage falls back to a fixed default so every issue still lands in the
  admin queue.
"""

import logging
from typing import List, Optional

from campuslink.services.gemini_client import get_gemini_client, GeminiClient, JSONNotFoundError

logger = logging.getLogger(__name__)

ISSUE_CATEGORIES = ["Safety", "Hygiene", "Infrastructure", "Canteen"]
PRIORITIES = ["Low", "Medium", "High"]
SEVERITIES = ["low", "medium", "high"]

DEFAULT_CATEGORY = "Infrastructure"
DEFAULT_PRIORITY = "Medium"
SUMMARY_FALLBACK_CHARS = 100


class ContentRejectedError(ValueError):
    """User content was flagged by moderation."""

    def __init__(self, reason: str, severity: str = "medium"):
        super().__init__(reason)
        self.reason = reason
        self.severity = severity


# ============================================================
# JSON VALIDATION HELPERS
# ============================================================

def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "no", "0", "")
    return bool(value)


def _pick(value, allowed: List[str], default: str) -> str:
    """Case-insensitive match of value against allowed; default otherwise."""
    text = str(value or "").strip().lower()
    for option in allowed:
        if option.lower() == text:
            return option
    return default


def validate_moderation(data: dict) -> dict:
    """
    Validate and sanitize a moderation verdict.
    A missing "safe" key counts as safe.
    """
    safe = _as_bool(data.get("safe", True))
    return {
        "safe": safe,
        "reason": "" if safe else (str(data.get("reason") or "").strip() or "Content flagged by moderation"),
        "severity": _pick(data.get("severity"), SEVERITIES, "low" if safe else "medium")
    }


def validate_triage(data: dict, description: str) -> dict:
    """
    Validate and sanitize an issue triage result.
    """
    tags = data.get("tags", [])
    if not isinstance(tags, list):
        tags = []
    summary = str(data.get("summary") or "").strip()
    return {
        "category": _pick(data.get("category"), ISSUE_CATEGORIES, DEFAULT_CATEGORY),
        "priority": _pick(data.get("priority"), PRIORITIES, DEFAULT_PRIORITY),
        "tags": [str(t).strip().lower() for t in tags if str(t).strip()][:8],
        "summary": summary or description[:SUMMARY_FALLBACK_CHARS],
        "source": "ai"
    }


def fallback_triage(description: str, tag: str = "general") -> dict:
    return {
        "category": DEFAULT_CATEGORY,
        "priority": DEFAULT_PRIORITY,
        "tags": [tag],
        "summary": description[:SUMMARY_FALLBACK_CHARS],
        "source": "fallback"
    }


# ============================================================
# MODERATION SERVICE
# ============================================================

class ModerationService:
    """
    Screens user text with the AI moderator.
    """

    def __init__(self, ai_client: Optional[GeminiClient] = None):
        self.ai_client = ai_client or get_gemini_client()

    def check(self, text: str, content_type: str = "general") -> dict:
        """
        Returns {"safe", "reason", "severity"}. Never raises.
        """
        try:
            return validate_moderation(self.ai_client.moderate_content(text, content_type))
        except JSONNotFoundError as e:
            logger.warning("Unparseable moderation reply for %s content: %s", content_type, e)
            return {"safe": True, "reason": "", "severity": "low"}
        except Exception as e:
            logger.warning("Moderation check failed for %s content: %s", content_type, e)
            return {"safe": True, "reason": "Moderation check failed", "severity": "low"}

    def ensure_safe(self, text: str, content_type: str = "general") -> dict:
        """
        Like check(), but raises ContentRejectedError for unsafe content.
        """
        verdict = self.check(text, content_type)
        if not verdict["safe"]:
            logger.info("Rejected %s content (%s): %s", content_type, verdict["severity"], verdict["reason"])
            raise ContentRejectedError(verdict["reason"], verdict["severity"])
        return verdict


# ============================================================
# ISSUE TRIAGE SERVICE
# ============================================================

class IssueTriageService:
    """
    Suggests category, priority, tags and summary for an issue report.
    """

    def __init__(self, ai_client: Optional[GeminiClient] = None):
        self.ai_client = ai_client or get_gemini_client()

    def categorize(self, description: str) -> dict:
        try:
            data = self.ai_client.categorize_issue(description, ISSUE_CATEGORIES)
            return validate_triage(data, description)
        except JSONNotFoundError as e:
            logger.warning("Unparseable triage reply, using defaults: %s", e)
            return fallback_triage(description, "general")
        except Exception as e:
            logger.warning("Issue triage failed, using defaults: %s", e)
            return fallback_triage(description, "uncategorized")


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================

def get_moderation_service() -> ModerationService:
    """Get moderation service instance."""
    return ModerationService()


def get_triage_service() -> IssueTriageService:
    """Get issue triage service instance."""
    return IssueTriageService()
