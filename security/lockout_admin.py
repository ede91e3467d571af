"""Administrative lock/unlock. The only way a permanent lockout is lifted."""
import logging
from datetime import timedelta

from models.account_lockout import AccountLockout
from security.bruteforce import count_recent_failures, current_policy
from security.lockout_policy import LockoutPolicy
from security.lockout_store import LockoutStore
from utils.audit import log_event
from utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)


def unlock_account(
    account_id: int,
    cleared_by: str | None = None,
    store: LockoutStore | None = None,
    policy: LockoutPolicy | None = None,
    clock: Clock = utc_now,
) -> int:
    """
    Deactivate every active lockout and reset the failure window.

    Failures at or before the clearance time stop counting, so the account
    does not re-lock on its next mistake. When nothing is active but the
    window still holds failures, an inactive clearance row is written to
    carry the reset. Returns the number of lockouts deactivated.
    """
    store = store or LockoutStore()
    policy = policy or current_policy()
    now = clock()

    pending = 0
    with store.unit_of_work():
        active = store.active_lockouts(account_id)
        for lockout in active:
            lockout.is_active = False
            lockout.lockout_end = now
            lockout.cleared_at = now
            lockout.cleared_by = cleared_by

        if not active:
            pending = count_recent_failures(store, policy, account_id, now)
            if pending:
                store.add_lockout(AccountLockout(
                    user_id=account_id,
                    lockout_start=now,
                    lockout_end=now,
                    failed_attempts=pending,
                    is_active=False,
                    cleared_at=now,
                    cleared_by=cleared_by,
                ))

        if active or pending:
            log_event(
                "ACCOUNT_UNLOCKED",
                user_id=account_id,
                entity="user",
                entity_id=account_id,
                metadata={"cleared_by": cleared_by, "lockouts_cleared": len(active)},
                timestamp=now,
                session=store.session,
            )

    logger.info("Account %s has been unlocked (%s lockout(s) cleared)", account_id, len(active))
    return len(active)


def lock_account(
    account_id: int,
    minutes: int | None = None,
    locked_by: str | None = None,
    store: LockoutStore | None = None,
    policy: LockoutPolicy | None = None,
    clock: Clock = utc_now,
) -> AccountLockout:
    """
    Lock an account by hand. With minutes the lockout expires on its own,
    without it the account stays locked until unlock_account().
    """
    if minutes is not None and minutes <= 0:
        raise ValueError("minutes must be positive")

    store = store or LockoutStore()
    policy = policy or current_policy()
    now = clock()

    with store.unit_of_work():
        failed_attempts = count_recent_failures(store, policy, account_id, now)
        lockout = store.add_lockout(AccountLockout(
            user_id=account_id,
            lockout_start=now,
            lockout_end=now + timedelta(minutes=minutes) if minutes is not None else None,
            failed_attempts=failed_attempts,
            is_active=True,
        ))
        log_event(
            "ACCOUNT_LOCKED_MANUAL",
            user_id=account_id,
            entity="account_lockout",
            entity_id=lockout.id,
            metadata={"locked_by": locked_by, "minutes": minutes},
            timestamp=now,
            session=store.session,
        )

    logger.info("Account %s locked by %s (minutes=%s)", account_id, locked_by or "admin", minutes)
    return lockout


def list_active_lockouts(account_id: int | None = None, store: LockoutStore | None = None) -> list[AccountLockout]:
    store = store or LockoutStore()
    if account_id is None:
        return store.all_active_lockouts()
    return store.active_lockouts(account_id)
