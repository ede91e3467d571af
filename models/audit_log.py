from utils.clock import utc_now
from models.db import db

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True, index=True)
    action = db.Column(db.String(80), nullable=False)  # e.g. ACCOUNT_LOCKED, ACCOUNT_UNLOCKED
    entity = db.Column(db.String(80), nullable=True)   # e.g. account_lockout
    entity_id = db.Column(db.String(80), nullable=True)

    ip = db.Column(db.String(45), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=utc_now, nullable=False)
