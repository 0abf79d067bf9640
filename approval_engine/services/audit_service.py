"""
Audit logging service
"""
from sqlalchemy.orm import Session
from approval_engine.models.audit_log import AuditLog
from approval_engine.utils.datetime_utils import now_utc
from approval_engine.utils.json_serializer import sanitize_for_json
from typing import Optional, Dict, Any, List


def log_audit(
    db: Session,
    actor_id: int,
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None,
    commit: bool = True
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        actor_id: ID of the user performing the action
        action: Action type (e.g. "REQUEST_SUBMIT", "REQUEST_APPROVE")
        entity_type: Type of entity (e.g. "requests", "leave_balances")
        entity_id: ID of the affected entity (optional)
        meta: Additional metadata as dictionary (optional)
        commit: False when the entry must commit together with the caller's transaction

    Returns:
        Created AuditLog instance
    """
    safe_meta = sanitize_for_json(meta) if meta is not None else None

    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_json=safe_meta,
        created_at=now_utc()
    )
    db.add(audit_log)
    if commit:
        db.commit()
        db.refresh(audit_log)
    return audit_log


def list_audit_entries(
    db: Session,
    entity_type: str,
    entity_id: int
) -> List[AuditLog]:
    """Audit trail of one entity, oldest first."""
    return (
        db.query(AuditLog)
        .filter(AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id)
        .order_by(AuditLog.id)
        .all()
    )
