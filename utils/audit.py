import json
from datetime import datetime

from models import db
from models.audit_log import AuditLog


def log_event(
    action: str,
    user_id=None,
    entity=None,
    entity_id=None,
    ip=None,
    metadata=None,
    timestamp: datetime | None = None,
    session=None,
) -> AuditLog:
    """
    Stage an audit row in the current session.
    Not committed here: it lands (or rolls back) with the caller's unit of work.
    """
    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip[:45] if ip else None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    if timestamp is not None:
        row.timestamp = timestamp
    (session if session is not None else db.session).add(row)
    return row
