from datetime import datetime
from models.db import db

class AccountLockout(db.Model):
    __tablename__ = "account_lockouts"
    __table_args__ = (
        db.Index("ix_account_lockouts_user_id_is_active", "user_id", "is_active"),
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    lockout_start = db.Column(db.DateTime, nullable=False)
    # NULL = permanent, only an administrator can clear it
    lockout_end = db.Column(db.DateTime, nullable=True)

    failed_attempts = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    cleared_by = db.Column(db.Text, nullable=True)
    cleared_at = db.Column(db.DateTime, nullable=True)

    @property
    def is_permanent(self) -> bool:
        return self.lockout_end is None

    def is_expired(self, now: datetime) -> bool:
        return self.lockout_end is not None and self.lockout_end <= now
