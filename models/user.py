from utils.clock import utc_now
from models.db import db

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    # attempts and lockouts go away with the account
    login_attempts = db.relationship(
        "LoginAttempt", backref="user", cascade="all, delete-orphan", passive_deletes=True
    )
    lockouts = db.relationship(
        "AccountLockout", backref="user", cascade="all, delete-orphan", passive_deletes=True
    )
