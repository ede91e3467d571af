from models.db import db

# Long enough for an IPv6 literal
IP_MAX_LENGTH = 45

class LoginAttempt(db.Model):
    __tablename__ = "login_attempts"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    succeeded = db.Column(db.Boolean, nullable=False)

    # stored for forensics only, never used to decide anything
    ip = db.Column(db.String(IP_MAX_LENGTH), nullable=True)

    occurred_at = db.Column(db.DateTime, nullable=False, index=True)
