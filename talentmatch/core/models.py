# talentmatch/core/models.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from talentmatch.core.errors import InvalidCandidateRecord

# ---------- coercion helpers (caller snapshots are loosely typed) ----------

_LIST_SPLIT = re.compile(r"\s*[,;\n]\s*")


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Best-effort timestamp coercion. Accepts datetime, date, ISO-8601 strings
    (with or without a trailing 'Z') and epoch seconds. Naive values are UTC.
    Returns None for anything unusable.
    """
    if value is None or value == "":
        return None
    dt: Optional[datetime] = None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            dt = datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        s = value.strip()
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _text(value: Any) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items: Iterable[Any] = _LIST_SPLIT.split(value)
    elif isinstance(value, Iterable):
        items = value
    else:
        items = [value]
    out: List[str] = []
    for it in items:
        s = _text(it)
        if s:
            out.append(s)
    return tuple(out)


def _as_year(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in record and record[k] is not None:
            return record[k]
    return None


# ---------- profile snapshot ----------

@dataclass(frozen=True)
class ApplicationEvent:
    timestamp: Optional[datetime]
    organization_id: Optional[str] = None

    @classmethod
    def from_value(cls, value: Any) -> "ApplicationEvent":
        if isinstance(value, ApplicationEvent):
            return value
        if isinstance(value, Mapping):
            ts = _first(value, "timestamp", "created_at", "createdAt", "applied_at")
            org = _first(value, "organization_id", "organizationId", "company_id", "companyId")
            return cls(timestamp=to_datetime(ts), organization_id=(_text(org) or None))
        # bare timestamp
        return cls(timestamp=to_datetime(value))


@dataclass(frozen=True)
class CandidateProfile:
    """Immutable snapshot of one candidate, as handed over by the profile owner."""
    id: str
    university: str = ""
    major: str = ""
    subjects: str = ""
    skills: Tuple[str, ...] = ()
    location: str = ""
    interests: Tuple[str, ...] = ()
    goals: Tuple[str, ...] = ()
    bio: str = ""
    graduation_year: Optional[int] = None
    applications: Tuple[ApplicationEvent, ...] = ()
    last_active_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, record: Any) -> "CandidateProfile":
        if not isinstance(record, Mapping):
            raise InvalidCandidateRecord(
                f"candidate record must be a mapping, got {type(record).__name__}"
            )
        cid = _text(_first(record, "id", "candidate_id", "userId"))
        if not cid:
            raise InvalidCandidateRecord("candidate record has no identifier", details={"keys": sorted(map(str, record))})

        apps_raw = _first(record, "applications", "application_history") or []
        if isinstance(apps_raw, (str, bytes)) or not isinstance(apps_raw, Iterable):
            apps_raw = []

        return cls(
            id=cid,
            university=_text(record.get("university")),
            major=_text(record.get("major")),
            subjects=_text(record.get("subjects")),
            skills=_as_tuple(record.get("skills")),
            location=_text(record.get("location")),
            interests=_as_tuple(record.get("interests")),
            goals=_as_tuple(_first(record, "goals", "goal")),
            bio=_text(record.get("bio")),
            graduation_year=_as_year(_first(record, "graduation_year", "graduationYear")),
            applications=tuple(ApplicationEvent.from_value(a) for a in apps_raw),
            last_active_at=to_datetime(_first(record, "last_active_at", "lastActiveAt")),
            created_at=to_datetime(_first(record, "created_at", "createdAt")),
        )

    @classmethod
    def coerce(cls, value: Any) -> "CandidateProfile":
        return value if isinstance(value, CandidateProfile) else cls.from_dict(value)


# ---------- normalization results ----------

@dataclass(frozen=True)
class NormalizedCategory:
    field: str
    standard: str
    category: str
    confidence: float
    raw: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "standard": self.standard,
            "category": self.category,
            "confidence": round(self.confidence, 4),
            "raw": self.raw,
        }


@dataclass(frozen=True)
class AIEnhancement:
    industry_alignment: Tuple[str, ...] = ()
    career_trajectory: str = ""
    skill_gaps: Tuple[str, ...] = ()
    working_style: str = ""
    market_value: str = ""
    confidence: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "industry_alignment": list(self.industry_alignment),
            "career_trajectory": self.career_trajectory,
            "skill_gaps": list(self.skill_gaps),
            "working_style": self.working_style,
            "market_value": self.market_value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Categorization:
    university: NormalizedCategory
    major: NormalizedCategory
    location: NormalizedCategory
    skills: Tuple[NormalizedCategory, ...] = ()
    subjects: Tuple[NormalizedCategory, ...] = ()
    ai_enhancement: Optional[AIEnhancement] = None

    def all_fields(self) -> List[NormalizedCategory]:
        return [self.university, self.major, *self.subjects, *self.skills, self.location]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "university": self.university.to_dict(),
            "major": self.major.to_dict(),
            "subjects": [s.to_dict() for s in self.subjects],
            "skills": [s.to_dict() for s in self.skills],
            "location": self.location.to_dict(),
            "ai_enhancement": self.ai_enhancement.to_dict() if self.ai_enhancement else None,
        }
