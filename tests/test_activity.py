"""
Tests for activity/engagement scoring and experience levels.
"""

from datetime import datetime, timedelta, timezone

import pytest

from talentmatch.core.activity import completeness, experience_level, score_activity


def _apps(now, n, orgs=None, days_ago=1):
    ts = (now - timedelta(days=days_ago)).isoformat()
    return [{"timestamp": ts, "organization_id": (orgs[i % len(orgs)] if orgs else None)} for i in range(n)]


class TestActivityScore:
    """Staircase recency penalty plus application volume."""

    def test_stale_and_no_applications(self, make_profile, now):
        p = make_profile(active_days_ago=45)
        m = score_activity(p, now=now)
        assert m.activity_score == 50
        assert m.days_since_active == 45
        assert m.application_count == 0

    def test_recent_and_busy_is_capped_at_100(self, make_profile, now):
        p = make_profile(applications=_apps(now, 5, orgs=["o1", "o2", "o3"]))
        m = score_activity(p, now=now)
        assert m.activity_score == 100
        assert m.distinct_organization_count == 3
        assert m.response_rate == pytest.approx(5 / 3)

    def test_idle_week_with_one_application(self, make_profile, now):
        p = make_profile(applications=_apps(now, 1, days_ago=10))
        assert score_activity(p, now=now).activity_score == 90

    def test_no_timestamps_is_treated_as_stale(self, make_profile, now):
        m = score_activity(make_profile(), now=now)
        assert m.days_since_active is None
        assert m.last_active_at is None
        assert m.activity_score == 50

    def test_created_at_is_the_fallback(self, make_profile, now):
        p = make_profile(created_at=(now - timedelta(days=3)).isoformat())
        m = score_activity(p, now=now)
        assert m.days_since_active == 3
        assert m.activity_score == 80

    def test_latest_of_last_active_and_applications(self, make_profile, now):
        p = make_profile(active_days_ago=40, applications=_apps(now, 2, days_ago=2))
        assert score_activity(p, now=now).days_since_active == 2

    def test_naive_timestamps_are_utc(self, make_profile, now):
        p = make_profile(last_active_at="2025-05-31T12:00:00")
        assert score_activity(p, now=now).days_since_active == 1

    def test_history_overrides_profile_applications(self, make_profile, now):
        p = make_profile(applications=_apps(now, 6))
        m = score_activity(p, now=now, history=[])
        assert m.application_count == 0

    def test_response_rate_zero_without_organizations(self, make_profile, now):
        m = score_activity(make_profile(applications=_apps(now, 2)), now=now)
        assert m.response_rate == 0.0

    def test_future_timestamps_clamp_to_zero_days(self, make_profile, now):
        p = make_profile(last_active_at=(now + timedelta(days=3)).isoformat())
        assert score_activity(p, now=now).days_since_active == 0

    def test_score_bounds(self, make_profile, now):
        for days in (0, 8, 31, 400):
            for n in (0, 1, 5, 50):
                m = score_activity(make_profile(active_days_ago=days, applications=_apps(now, n)), now=now)
                assert 0 <= m.activity_score <= 100


class TestCompleteness:
    """20 points per populated field."""

    def test_full_profile(self, make_profile):
        p = make_profile(university="AUD", major="CS", skills=["Python"], bio="hi", interests=["chess"])
        assert completeness(p) == 100

    def test_empty_profile(self, make_profile):
        assert completeness(make_profile()) == 0

    def test_partial_profile(self, make_profile):
        assert completeness(make_profile(university="AUD", bio="hello")) == 40


class TestExperienceLevel:
    """Derived from graduation year relative to the clock."""

    @pytest.mark.parametrize("year,level", [
        (2028, "high_school"),
        (2026, "current_student"),
        (2025, "recent_graduate"),
        (2023, "recent_graduate"),
        (2020, "experienced"),
        (None, "unknown"),
    ])
    def test_levels(self, make_profile, now, year, level):
        assert experience_level(make_profile(graduation_year=year), now=now) == level
