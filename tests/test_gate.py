"""LockoutGate: lock checks, lazy expiry, failure window, backoff."""
from datetime import timedelta

import pytest

from conftest import fail, make_user
from models import db
from models.account_lockout import AccountLockout
from models.audit_log import AuditLog


def add_lockout(user, start, end, active=True):
    lockout = AccountLockout(
        user_id=user.id, lockout_start=start, lockout_end=end,
        failed_attempts=10, is_active=active,
    )
    db.session.add(lockout)
    db.session.commit()
    return lockout


class TestIsLocked:
    def test_no_lockout(self, gate, user):
        assert gate.is_locked(user.id) is False

    def test_permanent_lockout(self, gate, user, clock):
        add_lockout(user, clock.now, None)
        clock.advance(days=365)
        assert gate.is_locked(user.id) is True

    def test_future_temporary_lockout(self, gate, user, clock):
        add_lockout(user, clock.now, clock.now + timedelta(minutes=5))
        assert gate.is_locked(user.id) is True

    def test_inactive_lockout_is_ignored(self, gate, user, clock):
        add_lockout(user, clock.now, None, active=False)
        assert gate.is_locked(user.id) is False

    def test_other_accounts_lockout_is_ignored(self, gate, user, clock):
        other = make_user("other@example.com")
        add_lockout(other, clock.now, None)
        assert gate.is_locked(user.id) is False

    def test_locked_exactly_at_limit(self, recorder, gate, user):
        fail(recorder, user, times=9)
        assert gate.is_locked(user.id) is False
        fail(recorder, user, times=1)
        assert gate.is_locked(user.id) is True


class TestLazyExpiry:
    def test_expired_lockout_is_deactivated_on_read(self, gate, user, clock):
        lockout = add_lockout(user, clock.now - timedelta(minutes=10), clock.now - timedelta(seconds=1))
        assert gate.is_locked(user.id) is False
        assert db.session.get(AccountLockout, lockout.id).is_active is False
        assert gate.is_locked(user.id) is False

    def test_lockout_ending_now_has_expired(self, gate, user, clock):
        add_lockout(user, clock.now - timedelta(minutes=1), clock.now)
        assert gate.is_locked(user.id) is False

    def test_expiry_happens_when_time_passes(self, gate, user, clock):
        lockout = add_lockout(user, clock.now, clock.now + timedelta(minutes=5))
        assert gate.is_locked(user.id) is True
        clock.advance(minutes=5, seconds=1)
        assert gate.is_locked(user.id) is False
        assert lockout.is_active is False

    def test_expiry_is_audited(self, gate, user, clock):
        add_lockout(user, clock.now - timedelta(minutes=2), clock.now - timedelta(minutes=1))
        gate.is_locked(user.id)
        assert AuditLog.query.filter_by(action="LOCKOUT_EXPIRED", user_id=user.id).count() == 1

    def test_multiple_active_lockouts_still_lock(self, gate, user, clock, caplog):
        permanent = add_lockout(user, clock.now - timedelta(hours=1), None)
        expired = add_lockout(user, clock.now - timedelta(minutes=10), clock.now - timedelta(minutes=1))

        with caplog.at_level("WARNING", logger="security.bruteforce"):
            assert gate.is_locked(user.id) is True

        assert "2 active lockouts" in caplog.text
        assert expired.is_active is False
        assert permanent.is_active is True


class TestFailedAttemptsCount:
    def test_counts_failures_only(self, recorder, gate, user):
        fail(recorder, user, times=3)
        recorder.record(user.id, True)
        assert gate.get_failed_attempts_count(user.id) == 3

    def test_window_boundary(self, recorder, gate, user, clock):
        fail(recorder, user)
        clock.advance(minutes=15)
        assert gate.get_failed_attempts_count(user.id) == 1
        clock.advance(seconds=1)
        assert gate.get_failed_attempts_count(user.id) == 0

    def test_window_slides(self, recorder, gate, user, clock):
        fail(recorder, user, times=2)
        clock.advance(minutes=10)
        fail(recorder, user, times=3)
        clock.advance(minutes=6)
        assert gate.get_failed_attempts_count(user.id) == 3


class TestBackoff:
    def test_no_delay_below_start(self, recorder, gate, user):
        fail(recorder, user, times=4)
        assert gate.get_backoff_delay_seconds(user.id) is None

    def test_full_window_right_after_failure(self, recorder, gate, user):
        fail(recorder, user, times=5)
        assert gate.get_backoff_delay_seconds(user.id) == 60

    def test_delay_shrinks_with_time(self, recorder, gate, user, clock):
        fail(recorder, user, times=5)
        clock.advance(seconds=20)
        assert gate.get_backoff_delay_seconds(user.id) == 40
        clock.advance(seconds=39)
        assert gate.get_backoff_delay_seconds(user.id) == 1

    def test_partial_seconds_round_up(self, recorder, gate, user, clock):
        fail(recorder, user, times=5)
        clock.advance(seconds=59, milliseconds=500)
        assert gate.get_backoff_delay_seconds(user.id) == 1

    def test_no_delay_once_window_elapsed(self, recorder, gate, user, clock):
        fail(recorder, user, times=7)
        clock.advance(seconds=60)
        assert gate.get_backoff_delay_seconds(user.id) is None

    @pytest.mark.parametrize("failures", [5, 6, 9])
    def test_delay_in_range_inside_band(self, recorder, gate, user, failures):
        fail(recorder, user, times=failures)
        delay = gate.get_backoff_delay_seconds(user.id)
        assert 0 < delay <= 60

    def test_measured_from_latest_failure(self, recorder, gate, user, clock):
        fail(recorder, user, times=5)
        clock.advance(seconds=50)
        fail(recorder, user)
        clock.advance(seconds=15)
        assert gate.get_backoff_delay_seconds(user.id) == 45

    def test_no_delay_at_lockout_limit(self, recorder, gate, user):
        fail(recorder, user, times=10)
        assert gate.get_backoff_delay_seconds(user.id) is None
        assert gate.is_locked(user.id) is True

    def test_no_delay_once_failures_leave_window(self, recorder, gate, user, clock):
        fail(recorder, user, times=6)
        clock.advance(minutes=16)
        assert gate.get_backoff_delay_seconds(user.id) is None
