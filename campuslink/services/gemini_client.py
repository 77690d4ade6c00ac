"""
Gemini API Client

Gemini exposes an OpenAI-compatible endpoint, so we use the openai library.

AI is used ONLY for:
- Content moderation (issue descriptions, mentor requests, chat messages)
- Issue triage (category, priority, tags, summary)
- Mentor scoring and search query parsing

Every caller has a local fallback. This client raises on failure and
leaves the fallback decision to the services.
"""
import json
import logging
import re
from typing import List

from openai import OpenAI

from campuslink.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class AIResponseError(ValueError):
    """The model answered, but not with the JSON we asked for."""


class JSONNotFoundError(AIResponseError):
    """The reply holds no JSON object at all (as opposed to broken JSON)."""


class GeminiClient:
    """
    Wrapper for the Gemini API with one method per prompt.
    """

    def __init__(self):
        self.client = OpenAI(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url
        )
        self.model = settings.gemini_model

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = 500) -> str:
        """
        Internal method to call the Gemini API.
        Returns raw text response.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens,
            temperature=0.1  # Low temp for consistent structured output
        )
        return response.choices[0].message.content or ""

    def _extract_json(self, text: str):
        """
        Extract JSON from an API response.
        The model sometimes wraps JSON in prose or markdown code fences,
        so we take the outermost object (or array) in the text.
        """
        text = (text or "").strip()
        match = _JSON_OBJECT.search(text) or _JSON_ARRAY.search(text)
        if not match:
            raise JSONNotFoundError(f"No JSON found in model reply: {text[:80]!r}")
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise AIResponseError(f"Malformed JSON in model reply: {e}") from e

    def _ask_json(self, system_prompt: str, user_content: str, max_tokens: int = 500) -> dict:
        data = self._extract_json(self._call_api(system_prompt, user_content, max_tokens))
        if not isinstance(data, dict):
            raise JSONNotFoundError("Expected a JSON object")
        return data

    def moderate_content(self, text: str, content_type: str = "general") -> dict:
        """
        Check user content for abuse. Returns raw {"safe", "reason", "severity"}.
        """
        system_prompt = f"""You are a content moderation system for a college campus app.
Analyze the {content_type} content for:
- Profanity or abusive language
- Hate speech or discrimination
- Sexual or inappropriate content
- Personal attacks or bullying
- Spam or promotional content
- Requests for illegal activities
Respond with JSON only:
{{"safe": true/false, "reason": "brief reason if unsafe, empty if safe", "severity": "low/medium/high"}}"""

        return self._ask_json(system_prompt, text, max_tokens=150)

    def categorize_issue(self, description: str, categories: List[str]) -> dict:
        """
        Categorize and prioritize a campus issue.
        """
        system_prompt = f"""You are an AI assistant for a college campus issue reporting system.
Categorize the issue.
Categories: {", ".join(categories)}
Priority: Low (minor inconvenience), Medium (affects daily life), High (urgent/safety concern)
Respond with JSON only:
{{"category": "one of the categories", "priority": "Low/Medium/High", "tags": ["relevant", "keywords"], "summary": "one sentence summary"}}"""

        return self._ask_json(system_prompt, description, max_tokens=250)

    def calculate_mentor_match(
        self,
        mentor_skills: List[str],
        learner_needs: List[str],
        mentor_bio: str,
        learner_bio: str
    ) -> dict:
        """
        Score a mentor for a learner. Returns raw {"score", "reason", "matchedSkills"}.
        """
        system_prompt = """You are a mentor matching system for college students.
Calculate a match score (0-100) and explain why they are a good match.
Consider skill overlap, learning style compatibility, and shared interests.
Respond with JSON only:
{"score": 0-100, "reason": "2-3 sentence explanation", "matchedSkills": ["skills that overlap"]}"""

        user_content = (
            f"Mentor has these skills: {', '.join(mentor_skills)}\n"
            f"Mentor bio: \"{mentor_bio}\"\n"
            f"Student wants to learn: {', '.join(learner_needs)}\n"
            f"Student bio: \"{learner_bio}\""
        )
        return self._ask_json(system_prompt, user_content, max_tokens=300)

    def parse_search_query(self, query: str) -> dict:
        """
        Extract skills and interests from a free-text mentor search.
        """
        system_prompt = """Extract skills and interests from the mentor search query.
Respond with JSON only:
{"skills": ["extracted", "skills"], "keywords": ["other", "relevant", "terms"]}"""

        return self._ask_json(system_prompt, query, max_tokens=150)

    def test_connection(self) -> bool:
        """Test if the Gemini API is reachable"""
        try:
            response = self._call_api(
                "You are a test assistant.",
                "Reply with exactly: OK",
                max_tokens=10
            )
            return "OK" in response.upper()
        except Exception as e:
            logger.error("Gemini connection failed: %s", e)
            return False


# Singleton instance
_gemini_client: GeminiClient = None


def get_gemini_client() -> GeminiClient:
    """Get or create Gemini client (singleton pattern)"""
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
