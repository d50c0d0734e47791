"""Tests for jobboard/services/status_notifier.py.

Applications are plain namespaces; the notifier only reads and writes
attributes, so no database is needed here.
"""
import asyncio
from datetime import timedelta
from types import SimpleNamespace

import pytest

from jobboard.config import EmailRateLimitSettings
from jobboard.services.email_rate_limit import EmailCategory, EmailRateLimiter
from jobboard.services.status_notifier import NotificationOutcome, StatusNotifier

from conftest import NOW, RecordingEmailSender


def _application(**overrides):
    fields = dict(
        id=1,
        status="contacted",
        candidate_name="Ada",
        candidate_email="ada@example.com",
        recruiter_name="Sam",
        recruiter_email="sam@example.com",
        job_title="Kite Instructor",
        job_company="Wave Co",
        last_status_notified=None,
        last_status_email_sent_at=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


class ExplodingSender(RecordingEmailSender):
    async def send(self, message):
        raise RuntimeError("provider down")


@pytest.fixture
def rate_limiter(clock):
    return EmailRateLimiter(limits=EmailRateLimitSettings(), clock=clock)


@pytest.fixture
def sender():
    return RecordingEmailSender()


@pytest.fixture
def notifier(sender, rate_limiter, clock):
    return StatusNotifier(sender, rate_limiter=rate_limiter, clock=clock, window=timedelta(minutes=30))


def _notify(notifier, application):
    return asyncio.run(notifier.notify_status_change(application))


def test_first_notification_is_sent_and_recorded(notifier, sender, rate_limiter):
    application = _application()
    result = _notify(notifier, application)

    assert result.outcome == NotificationOutcome.SENT
    assert len(sender.sent) == 1
    message = sender.sent[0]
    assert message.to == "ada@example.com"
    assert message.reply_to == "sam@example.com"
    assert message.subject == "Application Update: Contacted - Kite Instructor"
    assert message.tags == {"type": "application", "event": "status_changed", "status": "contacted"}
    assert application.last_status_notified == "contacted"
    assert application.last_status_email_sent_at == NOW
    assert rate_limiter.get_user_counts("ada@example.com")["status_hourly"] == 1


@pytest.mark.parametrize("status", ["applied", "viewed", "hired", "accepted", "withdrawn"])
def test_non_notifying_statuses_are_skipped(notifier, sender, status):
    result = _notify(notifier, _application(status=status))
    assert result.outcome == NotificationOutcome.SKIPPED
    assert sender.sent == []


def test_missing_candidate_email_is_skipped(notifier, sender):
    application = _application(candidate_email=None)
    result = _notify(notifier, application)
    assert result.outcome == NotificationOutcome.SKIPPED
    assert application.last_status_notified is None


def test_lower_priority_within_window_is_suppressed(notifier, sender, clock):
    application = _application(
        status="contacted",
        last_status_notified="interviewing",
        last_status_email_sent_at=NOW,
    )
    clock.advance(timedelta(minutes=10))
    result = _notify(notifier, application)

    assert result.outcome == NotificationOutcome.SUPPRESSED
    assert "10 minute" in result.reason
    assert sender.sent == []
    assert application.last_status_notified == "interviewing"
    assert application.last_status_email_sent_at == NOW


def test_higher_priority_replaces_notified_status(notifier, sender, clock):
    application = _application(
        status="offered",
        last_status_notified="contacted",
        last_status_email_sent_at=NOW,
    )
    clock.advance(timedelta(minutes=5))
    result = _notify(notifier, application)

    assert result.outcome == NotificationOutcome.SENT
    assert application.last_status_notified == "offered"
    assert application.last_status_email_sent_at == NOW + timedelta(minutes=5)


def test_sequence_after_override_suppresses_lower_statuses(notifier, sender, clock):
    application = _application(status="contacted")
    assert _notify(notifier, application).outcome == NotificationOutcome.SENT

    clock.advance(timedelta(minutes=2))
    application.status = "interviewing"
    assert _notify(notifier, application).outcome == NotificationOutcome.SENT

    clock.advance(timedelta(minutes=2))
    application.status = "rejected"
    assert _notify(notifier, application).outcome == NotificationOutcome.SUPPRESSED

    # Window restarts from the interviewing email
    clock.advance(timedelta(minutes=28))
    assert _notify(notifier, application).outcome == NotificationOutcome.SENT
    assert [m.tags["status"] for m in sender.sent] == ["contacted", "interviewing", "rejected"]


def test_failed_send_leaves_bookkeeping_untouched(rate_limiter, clock):
    notifier = StatusNotifier(RecordingEmailSender(result=False), rate_limiter=rate_limiter, clock=clock)
    application = _application()
    result = _notify(notifier, application)

    assert result.outcome == NotificationOutcome.FAILED
    assert application.last_status_notified is None
    assert application.last_status_email_sent_at is None
    assert rate_limiter.get_user_counts("ada@example.com")["hourly"] == 0


def test_sender_exception_is_contained(rate_limiter, clock):
    notifier = StatusNotifier(ExplodingSender(), rate_limiter=rate_limiter, clock=clock)
    application = _application()
    result = _notify(notifier, application)

    assert result.outcome == NotificationOutcome.FAILED
    assert "provider down" in result.reason
    assert application.last_status_notified is None


def test_rate_limit_is_logged_not_enforced(notifier, sender, rate_limiter, caplog):
    for _ in range(5):
        rate_limiter.record_sent("ada@example.com", EmailCategory.IMPORTANT_TRANSACTIONAL, "status_changed")
    with caplog.at_level("WARNING", logger="jobboard.notifications"):
        result = _notify(notifier, _application())

    assert result.outcome == NotificationOutcome.SENT
    assert "Status email hourly limit exceeded" in caplog.text


def test_opted_out_candidate_is_suppressed(sender, rate_limiter, clock):
    opted_out = SimpleNamespace(application_updates=False, job_alerts="weekly", marketing=False)
    notifier = StatusNotifier(
        sender, rate_limiter=rate_limiter, clock=clock, preferences_lookup=lambda email: opted_out
    )
    application = _application(status="offered")
    result = _notify(notifier, application)

    assert result.outcome == NotificationOutcome.SUPPRESSED
    assert result.reason == "User has disabled application update emails"
    assert sender.sent == []
    assert application.last_status_notified is None
    assert rate_limiter.get_user_counts("ada@example.com")["hourly"] == 0


def test_candidate_with_updates_enabled_is_emailed(sender, rate_limiter, clock):
    prefs = SimpleNamespace(application_updates=True, job_alerts="never", marketing=False)
    notifier = StatusNotifier(sender, rate_limiter=rate_limiter, clock=clock, preferences_lookup=lambda email: prefs)
    assert _notify(notifier, _application()).outcome == NotificationOutcome.SENT


def test_broken_preferences_lookup_still_sends(sender, rate_limiter, clock):
    def lookup(email):
        raise RuntimeError("database unavailable")

    notifier = StatusNotifier(sender, rate_limiter=rate_limiter, clock=clock, preferences_lookup=lookup)
    assert _notify(notifier, _application()).outcome == NotificationOutcome.SENT


def test_email_carries_unsubscribe_footer(notifier, sender):
    _notify(notifier, _application())
    message = sender.sent[0]
    assert "/api/email/unsubscribe?token=" in message.html
    assert "Unsubscribe from these emails" in message.html
    assert "\nUnsubscribe: " in message.text
    assert "/job-seeker/account/edit" in message.text
