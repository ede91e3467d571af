"""
Brute-force protection for logins.

AttemptRecorder writes one LoginAttempt per authentication attempt and opens a
permanent lockout once the failures in the trailing window reach the limit.
LockoutGate answers the questions asked before a password is even checked:
is the account locked, and must the caller wait before trying again.

Both are stateless: every count is recomputed from the database, so they can
be built per request and shared across processes.
"""
import logging
import math
from datetime import datetime, timedelta

from flask import current_app

from models.account_lockout import AccountLockout
from models.login_attempt import LoginAttempt, IP_MAX_LENGTH
from security.lockout_policy import LockoutPolicy
from security.lockout_store import LockoutStore
from utils.audit import log_event
from utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)


def count_recent_failures(store: LockoutStore, policy: LockoutPolicy, user_id: int, now: datetime) -> int:
    """
    Failed attempts inside the trailing window.
    Failures at or before the last administrative unlock never count.
    """
    since = now - policy.attempt_window
    return store.count_failures(user_id, since, after=store.last_clearance(user_id))


class AttemptRecorder:
    def __init__(self, store: LockoutStore, policy: LockoutPolicy, clock: Clock = utc_now):
        self.store = store
        self.policy = policy
        self.clock = clock

    def record(self, account_id: int, succeeded: bool, origin_address: str | None = None) -> None:
        """
        Persist one attempt and evolve lockout state, all in one commit.
        The caller must already have resolved account_id to an existing account.
        """
        now = self.clock()

        with self.store.unit_of_work():
            self.store.add_attempt(LoginAttempt(
                user_id=account_id,
                succeeded=bool(succeeded),
                ip=origin_address[:IP_MAX_LENGTH] if origin_address else None,
                occurred_at=now,
            ))

            if succeeded:
                self._clear_temporary_lockouts(account_id)
            else:
                self._lock_if_over_limit(account_id, now, origin_address)

    def _lock_if_over_limit(self, account_id: int, now: datetime, origin_address: str | None) -> None:
        failed_attempts = count_recent_failures(self.store, self.policy, account_id, now)
        if failed_attempts < self.policy.max_failed_attempts:
            return

        lockout = self.store.add_lockout(AccountLockout(
            user_id=account_id,
            lockout_start=now,
            lockout_end=None,
            failed_attempts=failed_attempts,
            is_active=True,
        ))
        log_event(
            "ACCOUNT_LOCKED",
            user_id=account_id,
            entity="account_lockout",
            entity_id=lockout.id,
            ip=origin_address,
            metadata={"failed_attempts": failed_attempts},
            timestamp=now,
            session=self.store.session,
        )
        logger.warning(
            "User %s has been locked out after %s failed login attempts", account_id, failed_attempts
        )

    def _clear_temporary_lockouts(self, account_id: int) -> None:
        # permanent lockouts survive a successful login; only an admin lifts them
        for lockout in self.store.active_temporary_lockouts(account_id):
            lockout.is_active = False


class LockoutGate:
    def __init__(self, store: LockoutStore, policy: LockoutPolicy, clock: Clock = utc_now):
        self.store = store
        self.policy = policy
        self.clock = clock

    def is_locked(self, account_id: int) -> bool:
        """
        True while any lockout for the account is active.
        Time-bounded lockouts found past their end are deactivated here.
        """
        now = self.clock()
        active = self.store.active_lockouts(account_id)
        if not active:
            return False

        if len(active) > 1:
            logger.warning(
                "User %s has %s active lockouts (ids=%s); treating account as locked",
                account_id, len(active), [lockout.id for lockout in active],
            )

        expired = [lockout for lockout in active if lockout.is_expired(now)]
        still_locked = len(expired) < len(active)

        if expired:
            with self.store.unit_of_work():
                for lockout in expired:
                    lockout.is_active = False
                    log_event(
                        "LOCKOUT_EXPIRED",
                        user_id=account_id,
                        entity="account_lockout",
                        entity_id=lockout.id,
                        metadata={"lockout_end": lockout.lockout_end},
                        timestamp=now,
                        session=self.store.session,
                    )
            logger.info("Expired %s lockout(s) for user %s", len(expired), account_id)

        return still_locked

    def get_backoff_delay_seconds(self, account_id: int) -> int | None:
        """
        Seconds the caller must wait before the next attempt, or None.

        Only applies while the failure count sits between the backoff start
        and the lockout limit. At the limit is_locked() takes over.
        """
        now = self.clock()
        failed_attempts = count_recent_failures(self.store, self.policy, account_id, now)

        if failed_attempts < self.policy.backoff_start_attempt:
            return None
        if failed_attempts >= self.policy.max_failed_attempts:
            return None

        last_failure = self.store.latest_failure(account_id)
        if last_failure is None:
            return None

        elapsed = max(now - last_failure.occurred_at, timedelta(0))
        if elapsed >= self.policy.backoff_window:
            return None

        remaining = math.ceil((self.policy.backoff_window - elapsed).total_seconds())
        return min(max(remaining, 1), self.policy.backoff_window_seconds)

    def get_failed_attempts_count(self, account_id: int) -> int:
        return count_recent_failures(self.store, self.policy, account_id, self.clock())


def current_policy() -> LockoutPolicy:
    return LockoutPolicy.from_config(current_app.config)


def get_recorder(clock: Clock | None = None) -> AttemptRecorder:
    return AttemptRecorder(LockoutStore(), current_policy(), clock or utc_now)


def get_gate(clock: Clock | None = None) -> LockoutGate:
    return LockoutGate(LockoutStore(), current_policy(), clock or utc_now)
