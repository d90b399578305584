# talentmatch/core/tags.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from talentmatch.core.models import CandidateProfile, Categorization, NormalizedCategory

FIELD_MIN_CONFIDENCE = 0.5
SKILL_MIN_CONFIDENCE = 0.6
AI_DEFAULT_CONFIDENCE = 0.7
AI_EXAMPLE = "AI predicted"


@dataclass(frozen=True)
class SemanticTag:
    id: str
    category: str
    value: str
    confidence: float
    related_terms: Tuple[str, ...] = ()
    frequency: int = 1
    examples: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "value": self.value,
            "confidence": round(self.confidence, 4),
            "related_terms": list(self.related_terms),
            "frequency": self.frequency,
            "examples": list(self.examples),
        }


def _slug(s: str) -> str:
    return "_".join((s or "").strip().lower().split())


def _tag(category: str, value: str, confidence: float, related: Iterable[str], examples: Iterable[str]) -> SemanticTag:
    value = _slug(value)
    return SemanticTag(
        id=f"{category}:{value}",
        category=category,
        value=value,
        confidence=float(confidence),
        related_terms=tuple(sorted({r for r in related if r})),
        frequency=1,
        examples=tuple(sorted({e for e in examples if e})),
    )


def _merge(a: SemanticTag, b: SemanticTag, frequency: int) -> SemanticTag:
    return replace(
        a,
        confidence=max(a.confidence, b.confidence),
        related_terms=tuple(sorted(set(a.related_terms) | set(b.related_terms))),
        examples=tuple(sorted(set(a.examples) | set(b.examples))),
        frequency=frequency,
    )


def _field_tags(categories: Categorization) -> List[SemanticTag]:
    out: List[SemanticTag] = []

    def add(category: str, nc: NormalizedCategory, minimum: float) -> None:
        if nc.confidence > minimum:
            out.append(_tag(category, nc.category, nc.confidence, [nc.standard], [nc.raw]))

    add("university", categories.university, FIELD_MIN_CONFIDENCE)
    add("major", categories.major, FIELD_MIN_CONFIDENCE)
    for s in categories.subjects:
        add("major", s, FIELD_MIN_CONFIDENCE)
    for s in categories.skills:
        add("skills", s, SKILL_MIN_CONFIDENCE)
    add("location", categories.location, FIELD_MIN_CONFIDENCE)
    return out


def _ai_tags(categories: Categorization) -> List[SemanticTag]:
    ai = categories.ai_enhancement
    if ai is None:
        return []
    conf = ai.confidence or AI_DEFAULT_CONFIDENCE
    out = [_tag("industry_fit", ind, conf, [ind], [AI_EXAMPLE]) for ind in ai.industry_alignment if ind]
    if ai.career_trajectory:
        out.append(_tag("career_path", ai.career_trajectory, conf, [ai.career_trajectory], [AI_EXAMPLE]))
    return out


def generate_tags(profile: Optional[CandidateProfile], categories: Categorization) -> List[SemanticTag]:
    """
    One tag per confidently normalized field plus the AI-derived tags.
    Same-id tags within a profile collapse into one (frequency stays 1).
    """
    by_id: Dict[str, SemanticTag] = {}
    for t in _field_tags(categories) + _ai_tags(categories):
        prev = by_id.get(t.id)
        by_id[t.id] = t if prev is None else _merge(prev, t, frequency=1)
    return [by_id[k] for k in sorted(by_id)]


def merge_tag_catalogue(tag_lists: Iterable[Iterable[SemanticTag]]) -> List[SemanticTag]:
    """
    Pool-level catalogue: frequency = number of candidates carrying the tag.
    Inputs are never mutated; a new list of new records is returned, sorted by id.
    """
    cat: Dict[str, SemanticTag] = {}
    for tags in tag_lists:
        seen_here = set()
        for t in tags:
            if t.id in seen_here:
                continue
            seen_here.add(t.id)
            prev = cat.get(t.id)
            if prev is None:
                cat[t.id] = replace(t, frequency=1)
            else:
                cat[t.id] = _merge(prev, t, frequency=prev.frequency + 1)
    return [cat[k] for k in sorted(cat)]
