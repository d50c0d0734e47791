"""Tests for jobboard/services/email_rate_limit.py - soft per-user limits."""
from datetime import timedelta

import pytest

from jobboard.config import EmailRateLimitSettings
from jobboard.services.email_rate_limit import EmailCategory, EmailRateLimiter


STATUS = (EmailCategory.IMPORTANT_TRANSACTIONAL, "status_changed")
JOB_ALERT = (EmailCategory.USER_NOTIFICATION, "job_alert")
OTHER = (EmailCategory.IMPORTANT_TRANSACTIONAL, "application_received")


@pytest.fixture
def limits():
    return EmailRateLimitSettings(
        max_emails_per_hour=20,
        max_emails_per_day=100,
        max_status_emails_per_hour=5,
        max_job_alerts_per_hour=1,
        max_job_alerts_per_day=3,
    )


@pytest.fixture
def limiter(limits, clock):
    return EmailRateLimiter(limits=limits, clock=clock)


def _record(limiter, n, kind=OTHER, user="user123"):
    for _ in range(n):
        limiter.record_sent(user, *kind)


class TestCheck:
    def test_anonymous_users_always_pass(self, limiter):
        result = limiter.check(None, *STATUS)
        assert result.should_allow is True
        assert result.reason is None

    def test_within_limits(self, limiter):
        _record(limiter, 4, STATUS)
        result = limiter.check("user123", *STATUS)
        assert result.should_allow is True
        assert result.reason is None

    def test_hourly_limit_is_soft(self, limiter):
        _record(limiter, 20)
        result = limiter.check("user123", *OTHER)
        assert result.should_allow is True
        assert "Hourly limit exceeded: 20/20 emails" == result.reason
        assert result.counts["hourly"] == 20

    def test_daily_limit(self, limiter, clock):
        # 19 an hour stays under the hourly limit while the daily total climbs
        for _ in range(6):
            _record(limiter, 19)
            clock.advance(timedelta(hours=1))
        clock.advance(timedelta(minutes=-30))
        result = limiter.check("user123", *OTHER)
        assert result.should_allow is True
        assert "Daily limit exceeded" in result.reason
        assert result.counts["daily"] == 114

    def test_status_email_hourly_limit(self, limiter):
        _record(limiter, 5, STATUS)
        result = limiter.check("user123", *STATUS)
        assert result.should_allow is True
        assert "Status email hourly limit exceeded" in result.reason
        assert result.counts["status_hourly"] == 5

    def test_status_limit_ignores_other_events(self, limiter):
        _record(limiter, 5, STATUS)
        assert limiter.check("user123", *OTHER).reason is None

    def test_job_alert_hourly_limit(self, limiter):
        _record(limiter, 1, JOB_ALERT)
        result = limiter.check("user123", *JOB_ALERT)
        assert "Job alert hourly limit exceeded" in result.reason
        assert result.counts["job_alerts_hourly"] == 1

    def test_job_alert_daily_limit(self, limiter, clock):
        for _ in range(3):
            _record(limiter, 1, JOB_ALERT)
            clock.advance(timedelta(hours=1))
        result = limiter.check("user123", *JOB_ALERT)
        assert "Job alert daily limit exceeded" in result.reason
        assert result.counts["job_alerts_daily"] == 3
        assert result.counts["job_alerts_hourly"] == 0

    def test_users_are_counted_separately(self, limiter):
        _record(limiter, 20, user="busy")
        assert limiter.check("quiet", *OTHER).reason is None


class TestCounters:
    def test_record_increments_matching_counters(self, limiter):
        limiter.record_sent("user123", *STATUS)
        limiter.record_sent("user123", *JOB_ALERT)
        assert limiter.get_user_counts("user123") == {
            "hourly": 2,
            "daily": 2,
            "status_hourly": 1,
            "job_alerts_hourly": 1,
            "job_alerts_daily": 1,
        }

    def test_new_user_has_zero_counts(self, limiter):
        assert set(limiter.get_user_counts("newuser").values()) == {0}

    def test_anonymous_sends_are_not_tracked(self, limiter):
        limiter.record_sent(None, *STATUS)
        limiter.record_sent("", *STATUS)
        assert limiter.get_user_counts("") == limiter.get_user_counts("nobody")

    def test_hourly_counters_reset_after_an_hour(self, limiter, clock):
        _record(limiter, 3, STATUS)
        clock.advance(timedelta(hours=1))
        counts = limiter.get_user_counts("user123")
        assert counts["hourly"] == 0
        assert counts["status_hourly"] == 0
        assert counts["daily"] == 3

    def test_daily_counters_reset_while_user_stays_active(self, limiter, clock):
        # One alert every hour keeps the hourly counters cycling
        for _ in range(72):
            _record(limiter, 1, JOB_ALERT)
            clock.advance(timedelta(hours=1))
        counts = limiter.get_user_counts("user123")
        assert counts["daily"] <= 24
        assert counts["job_alerts_daily"] <= 24

    def test_daily_limit_clears_on_the_next_day(self, limiter, clock):
        for _ in range(3):
            _record(limiter, 1, JOB_ALERT)
            clock.advance(timedelta(hours=1))
        assert "daily limit" in limiter.check("user123", *JOB_ALERT).reason

        clock.advance(timedelta(hours=21))
        assert limiter.check("user123", *JOB_ALERT).reason is None
        assert limiter.get_user_counts("user123")["job_alerts_daily"] == 0

    def test_check_does_not_create_counters(self, limiter):
        for user in ("a", "b", "c"):
            limiter.check(user, *JOB_ALERT)
            limiter.check(user, *STATUS)
        assert len(limiter._hourly) == 0
        assert len(limiter._daily) == 0
        assert len(limiter._status_hourly) == 0
        assert len(limiter._job_alerts_hourly) == 0
        assert len(limiter._job_alerts_daily) == 0

    def test_reset_clears_everything(self, limiter):
        _record(limiter, 7, STATUS)
        limiter.reset()
        assert set(limiter.get_user_counts("user123").values()) == {0}
