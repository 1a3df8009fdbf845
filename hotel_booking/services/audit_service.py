import json
from sqlalchemy.orm import Session
from hotel_booking.models.audit_log import AuditLog

def log_audit(db: Session, actor_user_id: int | None, action: str, entity_type: str, entity_id: int, details: dict | None = None):
    """Stage an audit row; it is committed with the caller's transaction."""
    if actor_user_id is None:
        return
    db.add(AuditLog(
        actor_user_id=actor_user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details_json=json.dumps(details or {}, ensure_ascii=False, default=str),
    ))
