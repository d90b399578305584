# talentmatch/core/parsing.py
"""
Recruiter query -> SearchCriteria with fixed, ordered keyword triggers.

Deliberately simple: no grammar, no embeddings. A word that fires triggers in
several categories fires all of them ("software engineering" asks for both
technology and engineering).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from talentmatch.core.knowledge_base import FIELD_LOCATION, KnowledgeBase
from talentmatch.core.normalizer import normalize

ACTIVE_THRESHOLD = 70

# location triggers resolve to a region through the knowledge base
LOCATION_TRIGGERS: List[Tuple[str, str]] = [
    (r"\bdubai\b", "dubai"),
    (r"\bsharjah\b", "sharjah"),
    (r"\babu\s*dhabi\b", "abu dhabi"),
    (r"\bajman\b", "ajman"),
    (r"\bras\s+al\s+khaimah\b", "ras al khaimah"),
    (r"\bfujairah\b", "fujairah"),
    (r"\b(uae|emirates)\b", "uae"),
    (r"\bremote\b", "remote"),
]

FIELD_TRIGGERS: List[Tuple[str, str]] = [
    (r"\b(computer|cs|software|programming)\b", "technology"),
    (r"\bengineering\b", "engineering"),
    (r"\b(business|management|finance|marketing)\b", "business"),
    (r"\bdesign\b", "creative"),
    (r"\b(medicine|medical)\b", "healthcare"),
    (r"\bpsychology\b", "social_sciences"),
]

UNIVERSITY_TYPE_TRIGGERS: List[Tuple[str, str]] = [
    (r"\b(american|aud|aus)\b", "private_american"),
    (r"\b(public|national|federal)\b", "public_national"),
    (r"\b(british|branch|international)\b", "international_branch"),
    (r"\bmedical\s+university\b", "medical_specialized"),
    (r"\bhigh\s+school\b", "high_school"),
]

SKILL_TRIGGERS: List[Tuple[str, str]] = [
    (r"\b(programming|coding)\b", "programming"),
    (r"\bpython\b", "python"),
    (r"\bjavascript\b", "javascript"),
    (r"\bsql\b", "sql"),
    (r"\bdata\s+analysis\b", "data analysis"),
    (r"\bdesign\b", "design"),
    (r"\bmarketing\b", "marketing"),
    (r"\bcommunication\b", "communication"),
    (r"\bleadership\b", "leadership"),
]

# first hit wins
EXPERIENCE_TRIGGERS: List[Tuple[str, str]] = [
    (r"\bhigh\s+school\b", "high_school"),
    (r"\bstudents?\b", "current_student"),
    (r"\b(graduates?|grads?)\b", "recent_graduate"),
    (r"\b(senior|experienced)\b", "experienced"),
]

_ACTIVE = re.compile(r"\bactive\b")


@dataclass(frozen=True)
class SearchCriteria:
    query: str = ""
    locations: Tuple[str, ...] = ()
    fields: Tuple[str, ...] = ()
    university_types: Tuple[str, ...] = ()
    skills: Tuple[str, ...] = ()
    experience_level: Optional[str] = None
    activity_threshold: Optional[int] = None

    def is_empty(self) -> bool:
        return not (self.locations or self.fields or self.university_types or self.skills
                    or self.experience_level or self.activity_threshold is not None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "locations": list(self.locations),
            "fields": list(self.fields),
            "university_types": list(self.university_types),
            "skills": list(self.skills),
            "experience_level": self.experience_level,
            "activity_threshold": self.activity_threshold,
        }


def _collect(text: str, triggers: List[Tuple[str, str]]) -> List[str]:
    out: List[str] = []
    for pattern, value in triggers:
        if re.search(pattern, text) and value not in out:
            out.append(value)
    return out


def parse_query(free_text: Optional[str], kb: Optional[KnowledgeBase] = None) -> SearchCriteria:
    if free_text is None:
        return SearchCriteria()
    kb = kb or KnowledgeBase.default()
    q = re.sub(r"\s+", " ", str(free_text)).strip().lower()
    if not q:
        return SearchCriteria(query=str(free_text))

    regions: List[str] = []
    for term in _collect(q, LOCATION_TRIGGERS):
        region = normalize(FIELD_LOCATION, term, kb).category
        if region not in regions:
            regions.append(region)

    experience = _collect(q, EXPERIENCE_TRIGGERS)
    return SearchCriteria(
        query=str(free_text),
        locations=tuple(regions),
        fields=tuple(_collect(q, FIELD_TRIGGERS)),
        university_types=tuple(_collect(q, UNIVERSITY_TYPE_TRIGGERS)),
        skills=tuple(_collect(q, SKILL_TRIGGERS)),
        experience_level=experience[0] if experience else None,
        activity_threshold=ACTIVE_THRESHOLD if _ACTIVE.search(q) else None,
    )
