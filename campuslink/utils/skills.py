"""
Skill list helpers shared by profile validation and mentor matching.
"""

import re
from typing import Iterable, List, Union

_SPLIT = re.compile(r"[,\s]+")


def split_skills(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Turn "Python, Web Design ,, guitar" or a list into clean skill names.

    Items are trimmed, blanks dropped and duplicates removed
    case-insensitively (first spelling wins).
    """
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    seen = set()
    skills = []
    for item in items:
        name = " ".join(str(item).split())
        if name and name.lower() not in seen:
            seen.add(name.lower())
            skills.append(name)
    return skills


def query_words(query: str, min_length: int = 3) -> List[str]:
    """Lowercase words of a free-text query, split on commas and whitespace."""
    words = [w for w in _SPLIT.split((query or "").lower()) if len(w) >= min_length]
    return list(dict.fromkeys(words))
