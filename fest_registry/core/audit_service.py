"""
Audit logging for roster state changes. Call on every state change, inside the same
transaction as the change.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.core.models import AuditLog


async def log_audit(
    db: AsyncSession,
    college_id: Optional[int],
    entity_type: str,
    entity_id: int,
    action: str,
    *,
    from_status: Optional[str] = None,
    to_status: Optional[str] = None,
    performed_by: Optional[int] = None,
    performed_by_role: Optional[str] = None,
    remarks: Optional[str] = None,
) -> None:
    """Append one audit log entry. Caller must commit."""
    entry = AuditLog(
        college_id=college_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        from_status=from_status,
        to_status=to_status,
        performed_by=performed_by,
        performed_by_role=performed_by_role,
        remarks=remarks,
        timestamp=datetime.utcnow(),
    )
    db.add(entry)
