# talentmatch/core/normalizer.py
"""
Free-text field -> NormalizedCategory against a KnowledgeBase.

Cascade (first hit wins):
  1) exact variant/canonical match ............ 0.95
  2) whole-word containment ................... 0.95
     (input contains a variant; for majors also a variant containing the input)
  3) fuzzy similarity to a canonical name ..... similarity (only if > 0.7)
  4) per-field keyword rule ................... 0.6
  5) per-field fallback category .............. 0.3
Empty input short-circuits to ("Unknown", "unknown", 0.0).

Every call is total: no input string makes this raise.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, List, Optional, Tuple

from talentmatch.core.knowledge_base import (
    FIELD_LOCATION,
    FIELD_MAJOR,
    FIELD_SKILL,
    FIELD_UNIVERSITY,
    Entry,
    KnowledgeBase,
)
from talentmatch.core.models import CandidateProfile, Categorization, NormalizedCategory

MATCH_CONFIDENCE = 0.95
FUZZY_THRESHOLD = 0.7
KEYWORD_CONFIDENCE = 0.6
FALLBACK_CONFIDENCE = 0.3
FUZZY_MAX_LEN = 64
CONTAINED_MIN_LEN = 3

_SUBJECT_SPLIT = re.compile(r"\s*[,;/\n]\s*|\s+&\s+|\s+and\s+")


# ---------- text helpers ----------

def norm_text(s: Any) -> str:
    if s is None:
        return ""
    return re.sub(r"\s+", " ", str(s)).strip().lower()


def title_case(s: Any) -> str:
    """'  comp   SCI ' -> 'Comp Sci' (per whitespace token, rest lowered)."""
    words = norm_text(s).split(" ")
    return " ".join(w[:1].upper() + w[1:] for w in words if w)


@lru_cache(maxsize=512)
def _word_re(term: str) -> "re.Pattern[str]":
    return re.compile(rf"(?<!\w){re.escape(term)}(?!\w)")


def contains_word(haystack: str, needle: str) -> bool:
    return bool(needle) and bool(_word_re(needle).search(haystack))


# ---------- edit distance ----------

def levenshtein(a: str, b: str) -> int:
    """Classic insert/delete/substitute distance on a full (len(a)+1) x (len(b)+1) table."""
    a = a or ""
    b = b or ""
    rows, cols = len(a) + 1, len(b) + 1
    table = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j
    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,
                table[i][j - 1] + 1,
                table[i - 1][j - 1] + cost,
            )
    return table[rows - 1][cols - 1]


def similarity(a: str, b: str) -> float:
    a, b = norm_text(a), norm_text(b)
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return (longer - levenshtein(a, b)) / float(longer)


# ---------- matching passes ----------

def _terms(entry: Entry) -> List[str]:
    out = [norm_text(v) for v in entry.variants]
    out.append(norm_text(entry.canonical))
    return [t for t in out if t]


def _exact(key: str, entries: Tuple[Entry, ...]) -> Optional[Entry]:
    for e in entries:
        if key in _terms(e):
            return e
    return None


def _contained(key: str, entries: Tuple[Entry, ...], reverse: bool = False) -> Optional[Entry]:
    for e in entries:
        for t in _terms(e):
            if contains_word(key, t):
                return e
            if reverse and len(key) >= CONTAINED_MIN_LEN and contains_word(t, key):
                return e
    return None


def _fuzzy(key: str, entries: Tuple[Entry, ...]) -> Tuple[Optional[Entry], float]:
    if len(key) > FUZZY_MAX_LEN:
        return None, 0.0
    best: Optional[Entry] = None
    best_sim = 0.0
    for e in entries:
        sim = similarity(key, e.canonical)
        if sim > best_sim:  # strict: ties keep the earlier entry
            best, best_sim = e, sim
    if best is not None and best_sim > FUZZY_THRESHOLD:
        return best, best_sim
    return None, 0.0


def _keyword(key: str, rules: Tuple[Tuple[str, str], ...]) -> Optional[str]:
    for pattern, category in rules:
        if re.search(pattern, key):
            return category
    return None


# ---------- public API ----------

def normalize(field_type: str, raw_text: Any, kb: KnowledgeBase) -> NormalizedCategory:
    raw = "" if raw_text is None else str(raw_text)
    key = norm_text(raw)
    if not key:
        return NormalizedCategory(field_type, "Unknown", "unknown", 0.0, raw)

    entries = kb.entries(field_type)

    hit = _exact(key, entries) or _contained(key, entries, reverse=field_type == FIELD_MAJOR)
    if hit is not None:
        return NormalizedCategory(field_type, hit.canonical, hit.category, MATCH_CONFIDENCE, raw)

    hit, sim = _fuzzy(key, entries)
    if hit is not None:
        return NormalizedCategory(field_type, hit.canonical, hit.category, sim, raw)

    category = _keyword(key, kb.rules_for(field_type))
    if category is not None:
        return NormalizedCategory(field_type, title_case(raw), category, KEYWORD_CONFIDENCE, raw)

    return NormalizedCategory(field_type, title_case(raw), kb.fallback_category(field_type), FALLBACK_CONFIDENCE, raw)


def split_subjects(subjects: Any) -> List[str]:
    """'Math, Physics & Chemistry' -> ['Math', 'Physics', 'Chemistry']."""
    parts = _SUBJECT_SPLIT.split(str(subjects or "").strip())
    return [p.strip() for p in parts if p and p.strip()]


def normalize_profile(profile: CandidateProfile, kb: KnowledgeBase) -> Categorization:
    return Categorization(
        university=normalize(FIELD_UNIVERSITY, profile.university, kb),
        major=normalize(FIELD_MAJOR, profile.major, kb),
        location=normalize(FIELD_LOCATION, profile.location, kb),
        skills=tuple(normalize(FIELD_SKILL, s, kb) for s in profile.skills),
        subjects=tuple(normalize(FIELD_MAJOR, s, kb) for s in split_subjects(profile.subjects)),
    )
