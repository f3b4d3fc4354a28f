"""Skill-list normalization, slugs, and case-insensitive text matching."""

import re
from collections.abc import Iterable

# Characters stripped from delimited skill strings like "['Python', 'SQL']"
_SKILL_WRAPPERS = re.compile(r"[\[\]{}'\"]")
_SKILL_SPLIT = re.compile(r",\s*")
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str, max_length: int = 60) -> str:
    """Lowercase, dash-separated, ASCII-alnum form of ``text``."""
    slug = _NON_SLUG.sub("-", (text or "").lower()).strip("-")
    return slug[:max_length].rstrip("-") or "untitled"


def parse_skill_list(value) -> list[str] | None:
    """Coerce an upstream skills value into an ordered list of trimmed strings.

    Accepts a list/tuple or a delimited string. Returns None when the value
    is absent or of an unusable type so callers can pick their own default.
    """
    if value is None:
        return None

    if isinstance(value, str):
        cleaned = _SKILL_WRAPPERS.sub("", value)
        return [part.strip() for part in _SKILL_SPLIT.split(cleaned) if part.strip()]

    if isinstance(value, (list, tuple)):
        skills = []
        for item in value:
            if item is None or isinstance(item, (dict, list)):
                continue
            text = str(item).strip()
            if text:
                skills.append(text)
        return skills

    return None


def unique_skills(skill_lists: Iterable[Iterable[str]]) -> list[str]:
    """Union of several skill lists, deduplicated, in first-seen order."""
    seen: set[str] = set()
    union: list[str] = []
    for skills in skill_lists:
        for skill in skills or []:
            if skill and skill not in seen:
                seen.add(skill)
                union.append(skill)
    return union


def contains_ci(haystack: str | None, needle: str) -> bool:
    """Case-insensitive literal substring test. None never matches."""
    if haystack is None:
        return False
    return needle.lower() in haystack.lower()
