# talentmatch/core/activity.py
"""
Engagement scoring from a profile snapshot + application history.

activity_score (0..100):
  start at 100
  -30 if last interaction > 30 days ago (or unknown), else -10 if > 7 days
  -20 if no applications at all
  +10 if 5 or more applications
profile_completeness (0..100): 20 each for university, major, skills, bio, interests.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from talentmatch.core.models import ApplicationEvent, CandidateProfile, to_datetime

STALE_DAYS = 30
IDLE_DAYS = 7
STALE_PENALTY = 30
IDLE_PENALTY = 10
NO_APPLICATIONS_PENALTY = 20
BUSY_APPLICATIONS = 5
BUSY_BONUS = 10
COMPLETENESS_STEP = 20


@dataclass(frozen=True)
class ActivityMetrics:
    activity_score: int
    last_active_at: Optional[datetime]
    application_count: int
    distinct_organization_count: int
    response_rate: float
    profile_completeness: int
    days_since_active: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_score": self.activity_score,
            "last_active_at": self.last_active_at.isoformat() if self.last_active_at else None,
            "application_count": self.application_count,
            "distinct_organization_count": self.distinct_organization_count,
            "response_rate": round(self.response_rate, 4),
            "profile_completeness": self.profile_completeness,
            "days_since_active": self.days_since_active,
        }


def _utc_now(now: Optional[datetime]) -> datetime:
    return to_datetime(now) or datetime.now(timezone.utc)


def _clamp(v: int, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, v))


def last_interaction(profile: CandidateProfile, history: Iterable[ApplicationEvent]) -> Optional[datetime]:
    stamps = [a.timestamp for a in history if a.timestamp is not None]
    if profile.last_active_at is not None:
        stamps.append(profile.last_active_at)
    if stamps:
        return max(stamps)
    return profile.created_at


def completeness(profile: CandidateProfile) -> int:
    filled = [
        bool(profile.university),
        bool(profile.major),
        bool(profile.skills),
        bool(profile.bio),
        bool(profile.interests),
    ]
    return _clamp(COMPLETENESS_STEP * sum(filled))


def score_activity(
    profile: CandidateProfile,
    now: Optional[datetime] = None,
    history: Optional[Iterable[Any]] = None,
) -> ActivityMetrics:
    """
    `history` replaces profile.applications when given (events, mappings or
    bare timestamps are all accepted).
    """
    now_dt = _utc_now(now)
    if history is None:
        events = list(profile.applications)
    else:
        events = [ApplicationEvent.from_value(h) for h in history]

    last = last_interaction(profile, events)
    days: Optional[int] = None
    if last is not None:
        days = max(0, (now_dt - last).days)

    score = 100
    if days is None or days > STALE_DAYS:
        score -= STALE_PENALTY
    elif days > IDLE_DAYS:
        score -= IDLE_PENALTY

    n_apps = len(events)
    if n_apps == 0:
        score -= NO_APPLICATIONS_PENALTY
    elif n_apps >= BUSY_APPLICATIONS:
        score += BUSY_BONUS

    orgs = {e.organization_id for e in events if e.organization_id}
    rate = (n_apps / float(len(orgs))) if orgs else 0.0

    return ActivityMetrics(
        activity_score=_clamp(score),
        last_active_at=last,
        application_count=n_apps,
        distinct_organization_count=len(orgs),
        response_rate=rate,
        profile_completeness=completeness(profile),
        days_since_active=days,
    )


def experience_level(profile: CandidateProfile, now: Optional[datetime] = None) -> str:
    year = profile.graduation_year
    if year is None:
        return "unknown"
    current = _utc_now(now).year
    if year > current + 2:
        return "high_school"
    if year > current:
        return "current_student"
    if year >= current - 2:
        return "recent_graduate"
    return "experienced"
