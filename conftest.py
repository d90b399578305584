"""
Shared pytest fixtures: the shipped knowledge base, a fixed clock and a
candidate profile factory.
"""

from datetime import datetime, timedelta, timezone

import pytest

from talentmatch.core.knowledge_base import KnowledgeBase
from talentmatch.core.models import CandidateProfile


NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def kb():
    return KnowledgeBase.default()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def make_profile():
    """Build a CandidateProfile from keyword overrides (dict-shaped, like caller snapshots)."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        record = {"id": overrides.pop("id", f"cand-{counter['n']}")}
        days_ago = overrides.pop("active_days_ago", None)
        if days_ago is not None:
            record["last_active_at"] = (NOW - timedelta(days=days_ago)).isoformat()
        record.update(overrides)
        return CandidateProfile.from_dict(record)

    return _make


@pytest.fixture
def strong_record():
    """A dict record that normalizes every field with high confidence."""
    def _make(cid):
        return {
            "id": cid,
            "university": "AUD",
            "major": "Computer Science",
            "location": "Dubai",
            "skills": ["Python"],
        }
    return _make
