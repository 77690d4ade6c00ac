"""
Mentor Matching Service

PURPOSE:
Find students who can teach what a learner wants to learn, and explain
each suggestion.

HOW IT WORKS:
1. Work out what the learner needs: parse the search query with AI,
   or use the learner's profile "skills to learn"
2. Load every other profile that offers at least one skill
3. Rank candidates by keyword overlap and keep the top N for scoring
4. Score each candidate with the AI (0-100 + reason)
5. Sort by score and return the top results

FALLBACKS:
- Query parsing: split the query into words longer than two characters
- Scoring: keyword overlap (60 with overlap, 30 without)
The matching endpoint keeps working with the AI completely offline.
"""

import logging
from typing import List, Optional

from campuslink.core.config import get_settings
from campuslink.services.gemini_client import get_gemini_client, GeminiClient
from campuslink.services.mongo_service import (
    ProfileService,
    profile_skills_have,
    profile_skills_to_learn
)
from campuslink.utils.skills import split_skills, query_words

settings = get_settings()
logger = logging.getLogger(__name__)

OVERLAP_SCORE = 60
NO_OVERLAP_SCORE = 30


# ============================================================
# KEYWORD OVERLAP
# ============================================================

def skills_overlap(mentor_skills: List[str], learner_needs: List[str]) -> List[str]:
    """
    Mentor skills that match at least one need.

    A skill matches a need when either contains the other, ignoring case,
    so "Python" matches "python basics" (and "ML" matches "html").
    """
    needs = [n.lower() for n in learner_needs if n]
    matched = []
    for skill in mentor_skills:
        s = skill.lower()
        if s and any(s in n or n in s for n in needs):
            matched.append(skill)
    return matched


def fallback_match(mentor_skills: List[str], learner_needs: List[str]) -> dict:
    """Score a mentor without AI, from keyword overlap alone."""
    overlap = skills_overlap(mentor_skills, learner_needs)
    if overlap:
        return {
            "score": OVERLAP_SCORE,
            "reason": f"This mentor can help with: {', '.join(overlap)}",
            "matched_skills": overlap,
            "source": "fallback"
        }
    return {
        "score": NO_OVERLAP_SCORE,
        "reason": "This mentor has relevant experience in your field of interest",
        "matched_skills": [],
        "source": "fallback"
    }


def fallback_query_parse(query: str) -> dict:
    words = query_words(query)
    return {"skills": words, "keywords": words, "source": "fallback"}


# ============================================================
# JSON VALIDATION HELPERS
# ============================================================

def validate_match(data: dict, mentor_skills: List[str], learner_needs: List[str]) -> dict:
    """
    Validate and sanitize an AI match verdict.
    Score is clamped to 0-100; matched skills fall back to keyword overlap.
    """
    if data.get("score") is None:
        raise ValueError("Match reply has no score")
    try:
        score = int(round(float(data["score"])))
    except (ValueError, TypeError):
        raise ValueError(f"Non-numeric score: {data.get('score')!r}")
    score = max(0, min(100, score))

    matched = data.get("matchedSkills", data.get("matched_skills"))
    if isinstance(matched, list):
        matched = split_skills(str(s) for s in matched)
    else:
        matched = skills_overlap(mentor_skills, learner_needs)

    reason = str(data.get("reason") or "").strip()
    if not reason:
        reason = fallback_match(mentor_skills, learner_needs)["reason"]

    return {"score": score, "reason": reason, "matched_skills": matched, "source": "ai"}


def validate_query(data: dict, query: str) -> dict:
    skills = data.get("skills") if isinstance(data.get("skills"), list) else []
    keywords = data.get("keywords") if isinstance(data.get("keywords"), list) else []
    skills = split_skills(str(s) for s in skills)
    keywords = split_skills(str(k) for k in keywords)
    if not skills and not keywords:
        return fallback_query_parse(query)
    return {"skills": skills, "keywords": keywords, "source": "ai"}


# ============================================================
# MATCHING SERVICE
# ============================================================

class MentorMatchingService:
    """
    Finds and scores mentors for a learner.
    """

    def __init__(self, ai_client: Optional[GeminiClient] = None):
        self.ai_client = ai_client or get_gemini_client()
        self.profile_service = ProfileService()

    def parse_query(self, query: str) -> dict:
        """
        Extract {"skills", "keywords"} from a free-text search.
        """
        try:
            return validate_query(self.ai_client.parse_search_query(query), query)
        except Exception as e:
            logger.warning("Search query parsing failed, splitting words instead: %s", e)
            return fallback_query_parse(query)

    def score(
        self,
        mentor_skills: List[str],
        learner_needs: List[str],
        mentor_bio: str = "",
        learner_bio: str = ""
    ) -> dict:
        """
        Score one mentor for one learner. Never raises.
        """
        try:
            data = self.ai_client.calculate_mentor_match(
                mentor_skills, learner_needs, mentor_bio or "", learner_bio or ""
            )
            return validate_match(data, mentor_skills, learner_needs)
        except Exception as e:
            logger.warning("Mentor scoring failed, using keyword overlap: %s", e)
            return fallback_match(mentor_skills, learner_needs)

    def search(
        self,
        seeker_profile: dict,
        query: Optional[str] = None,
        limit: Optional[int] = None,
        min_score: int = 0
    ) -> dict:
        """
        Search mentors for a learner.

        Args:
            seeker_profile: The learner's profile document
            query: Free-text search; the profile's skills to learn when empty
            limit: Maximum number of results
            min_score: Drop matches scoring below this (0-100)

        Returns:
            {"needs": [...], "query_source": "...", "mentors": [...]}
        """
        limit = limit or settings.mentor_match_default_limit
        seeker_id = seeker_profile["user_id"]

        if query and query.strip():
            parsed = self.parse_query(query)
            # Extracted skills drive the search; keywords only when no skill was found
            needs = split_skills(parsed["skills"] or parsed["keywords"])
            query_source = parsed["source"]
        else:
            needs = profile_skills_to_learn(seeker_profile)
            query_source = "profile"

        result = {"needs": needs, "query_source": query_source, "mentors": []}
        if not needs:
            return result

        candidates = self.profile_service.list_mentor_candidates(seeker_id)

        # Keyword overlap decides who gets an AI call
        candidates.sort(
            key=lambda c: len(skills_overlap(profile_skills_have(c), needs)),
            reverse=True
        )
        candidates = candidates[:settings.mentor_match_max_candidates]

        mentors = []
        for candidate in candidates:
            mentor_skills = profile_skills_have(candidate)
            match = self.score(
                mentor_skills, needs,
                mentor_bio=candidate.get("bio", ""),
                learner_bio=seeker_profile.get("bio", "")
            )
            if match["score"] < min_score:
                continue
            mentors.append({
                "user_id": candidate["user_id"],
                "department": candidate.get("department"),
                "year": candidate.get("year"),
                "bio": candidate.get("bio", ""),
                "skills_have": mentor_skills,
                "score": match["score"],
                "reason": match["reason"],
                "matched_skills": match["matched_skills"],
                "source": match["source"]
            })

        mentors.sort(key=lambda m: (m["score"], len(m["matched_skills"])), reverse=True)
        result["mentors"] = mentors[:limit]
        logger.info(
            "Mentor search for user %s: %d needs, %d candidates scored, %d returned",
            seeker_id, len(needs), len(candidates), len(result["mentors"])
        )
        return result


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================

def get_matching_service() -> MentorMatchingService:
    """Get mentor matching service instance."""
    return MentorMatchingService()
