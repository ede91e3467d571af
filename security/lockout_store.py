"""
Database access for login attempts and lockouts.

Every query the lockout components need lives here so the decision logic in
security.bruteforce never touches the ORM directly. Nothing is committed
except through unit_of_work().
"""
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import func

from models import db
from models.account_lockout import AccountLockout
from models.login_attempt import LoginAttempt


class LockoutStore:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    @contextmanager
    def unit_of_work(self):
        """
        Commit everything done inside the block as one write.
        Any error rolls the whole block back and is re-raised as-is.
        """
        try:
            yield self
            self.session.commit()
        except BaseException:
            self.session.rollback()
            raise

    # ---- attempts ----

    def add_attempt(self, attempt: LoginAttempt) -> LoginAttempt:
        self.session.add(attempt)
        # make the row visible to the count that follows in the same transaction
        self.session.flush()
        return attempt

    def count_failures(self, user_id: int, since: datetime, after: datetime | None = None) -> int:
        """Failed attempts with occurred_at >= since (and strictly > after, if given)."""
        query = (
            self.session.query(func.count(LoginAttempt.id))
            .filter(
                LoginAttempt.user_id == user_id,
                LoginAttempt.succeeded.is_(False),
                LoginAttempt.occurred_at >= since,
            )
        )
        if after is not None:
            query = query.filter(LoginAttempt.occurred_at > after)
        return query.scalar() or 0

    def latest_failure(self, user_id: int) -> LoginAttempt | None:
        return (
            self.session.query(LoginAttempt)
            .filter_by(user_id=user_id, succeeded=False)
            .order_by(LoginAttempt.occurred_at.desc(), LoginAttempt.id.desc())
            .first()
        )

    # ---- lockouts ----

    def add_lockout(self, lockout: AccountLockout) -> AccountLockout:
        self.session.add(lockout)
        self.session.flush()
        return lockout

    def active_lockouts(self, user_id: int) -> list[AccountLockout]:
        """Active lockouts for the account, most recent lockout_start first."""
        return (
            self.session.query(AccountLockout)
            .filter_by(user_id=user_id, is_active=True)
            .order_by(AccountLockout.lockout_start.desc(), AccountLockout.id.desc())
            .all()
        )

    def active_temporary_lockouts(self, user_id: int) -> list[AccountLockout]:
        return (
            self.session.query(AccountLockout)
            .filter(
                AccountLockout.user_id == user_id,
                AccountLockout.is_active.is_(True),
                AccountLockout.lockout_end.isnot(None),
            )
            .all()
        )

    def all_active_lockouts(self) -> list[AccountLockout]:
        return (
            self.session.query(AccountLockout)
            .filter_by(is_active=True)
            .order_by(AccountLockout.lockout_start.desc(), AccountLockout.id.desc())
            .all()
        )

    def last_clearance(self, user_id: int) -> datetime | None:
        """When an administrator last cleared this account, if ever."""
        return (
            self.session.query(func.max(AccountLockout.cleared_at))
            .filter(AccountLockout.user_id == user_id)
            .scalar()
        )
