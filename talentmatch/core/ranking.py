# talentmatch/core/ranking.py
"""
Deterministic candidate ranking against SearchCriteria. No LLM at match time.

Points per candidate (total rounded, 0..100):
  field/major ....... 40  normalized major (or any subject) category is requested
  location .......... 25  normalized region, or its country, is requested
  skills ............ 20  20 * matched / requested
  university type ... 10  normalized university category is requested
  activity bonus ....  5  activity_score * 0.05, always applied
Filters the query does not mention contribute nothing. matched_keywords holds
only the requested skills the candidate matched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable as _Iterable
from collections.abc import Mapping as _Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from talentmatch.core.activity import score_activity
from talentmatch.core.errors import InvalidCandidatePool, InvalidCandidateRecord
from talentmatch.core.knowledge_base import KnowledgeBase
from talentmatch.core.models import CandidateProfile, NormalizedCategory, to_datetime
from talentmatch.core.normalizer import contains_word, norm_text, normalize_profile
from talentmatch.core.parsing import SearchCriteria

log = logging.getLogger("talentmatch.core.ranking")

FIELD_POINTS = 40.0
LOCATION_POINTS = 25.0
SKILL_POINTS = 20.0
UNIVERSITY_POINTS = 10.0
ACTIVITY_FACTOR = 0.05
HIGHLY_ACTIVE = 70


@dataclass(frozen=True)
class MatchResult:
    candidate_id: str
    score: int
    reasons: Tuple[str, ...] = ()
    matched_keywords: Tuple[str, ...] = ()
    activity_bonus: float = 0.0
    breakdown: Tuple[Tuple[str, float], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "score": self.score,
            "reasons": list(self.reasons),
            "matched_keywords": list(self.matched_keywords),
            "activity_bonus": round(self.activity_bonus, 2),
            "breakdown": {k: round(v, 2) for k, v in self.breakdown},
        }


# ---------- per-factor helpers ----------

def _skill_hit(requested: str, skills: Tuple[NormalizedCategory, ...]) -> bool:
    want = norm_text(requested)
    for nc in skills:
        if want in (norm_text(nc.standard), norm_text(nc.category)):
            return True
        if contains_word(norm_text(nc.raw), want):
            return True
    return False


def skill_points(requested: Iterable[str], skills: Tuple[NormalizedCategory, ...]) -> Tuple[float, List[str]]:
    req = list(requested)
    if not req:
        return 0.0, []
    matched = [r for r in req if _skill_hit(r, skills)]
    return SKILL_POINTS * len(matched) / float(len(req)), matched


def score_candidate(
    profile: CandidateProfile,
    criteria: SearchCriteria,
    kb: KnowledgeBase,
    now: Optional[datetime] = None,
) -> Optional[MatchResult]:
    """Score one candidate; None when the activity threshold excludes it."""
    cats = normalize_profile(profile, kb)
    metrics = score_activity(profile, now=now)
    if criteria.activity_threshold is not None and metrics.activity_score < criteria.activity_threshold:
        return None

    reasons: List[str] = []

    field_pts = 0.0
    if criteria.fields:
        if cats.major.category in criteria.fields:
            field_pts = FIELD_POINTS
            reasons.append(f"Studies {cats.major.standard}")
        else:
            hit = next((s for s in cats.subjects if s.category in criteria.fields), None)
            if hit is not None:
                field_pts = FIELD_POINTS
                reasons.append(f"Studies: {profile.subjects}")

    loc_pts = 0.0
    if criteria.locations:
        region = cats.location.category
        country = kb.location_country(region)
        if region in criteria.locations or (country and country in criteria.locations):
            loc_pts = LOCATION_POINTS
            reasons.append(f"Located in {cats.location.standard}")

    sk_pts, matched_skills = skill_points(criteria.skills, cats.skills)
    if matched_skills:
        reasons.append("Has skills: " + ", ".join(matched_skills))

    uni_pts = 0.0
    if criteria.university_types and cats.university.category in criteria.university_types:
        uni_pts = UNIVERSITY_POINTS
        reasons.append(f"Studies at {cats.university.standard}")

    bonus = metrics.activity_score * ACTIVITY_FACTOR
    if metrics.activity_score > HIGHLY_ACTIVE:
        reasons.append("Highly active on platform")

    total = field_pts + loc_pts + sk_pts + uni_pts + bonus
    return MatchResult(
        candidate_id=profile.id,
        score=max(0, min(100, int(round(total)))),
        reasons=tuple(reasons),
        matched_keywords=tuple(matched_skills),
        activity_bonus=bonus,
        breakdown=(
            ("field", field_pts),
            ("location", loc_pts),
            ("skills", sk_pts),
            ("university", uni_pts),
            ("activity", bonus),
        ),
    )


# ---------- pool ranking ----------

def coerce_pool(pool: Any) -> List[CandidateProfile]:
    """
    Turn a caller pool into profiles. A None / non-iterable pool is a contract
    violation; individual bad records are skipped with a warning.
    """
    if pool is None or isinstance(pool, (str, bytes, _Mapping)) or not isinstance(pool, _Iterable):
        raise InvalidCandidatePool(
            "candidate pool must be an iterable of records",
            details={"type": type(pool).__name__},
        )
    out: List[CandidateProfile] = []
    skipped = 0
    for idx, rec in enumerate(pool):
        try:
            out.append(CandidateProfile.coerce(rec))
        except InvalidCandidateRecord as e:
            skipped += 1
            log.warning("skipping candidate record #%d: %s", idx, e.message)
    if skipped:
        log.info("pool coerced: kept=%d skipped=%d", len(out), skipped)
    return out


def rank(
    pool: Any,
    criteria: SearchCriteria,
    kb: KnowledgeBase,
    now: Optional[datetime] = None,
    workers: int = 1,
    limit: Optional[int] = None,
) -> List[MatchResult]:
    profiles = coerce_pool(pool)
    now_dt = to_datetime(now) or datetime.now(timezone.utc)  # one clock for the whole pool

    def _one(p: CandidateProfile) -> Optional[MatchResult]:
        return score_candidate(p, criteria, kb, now=now_dt)

    if workers and workers > 1 and len(profiles) > 1:
        with ThreadPoolExecutor(max_workers=int(workers)) as ex:
            scored = list(ex.map(_one, profiles))  # map keeps input order
    else:
        scored = [_one(p) for p in profiles]

    results = [r for r in scored if r is not None]
    # stable: equal scores keep pool order
    results.sort(key=lambda r: -r.score)

    log.info("ranked candidates: pool=%d kept=%d workers=%d", len(profiles), len(results), max(1, int(workers or 1)))
    if limit is not None:
        return results[:max(0, int(limit))]
    return results
