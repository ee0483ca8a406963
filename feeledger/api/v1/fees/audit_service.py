"""
Audit logging for receipt and admission balance changes. Call on every ledger mutation.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from feeledger.core.enums import FeeAuditAction
from feeledger.core.models import FeeAuditLog


async def log_fee_audit(
    db: AsyncSession,
    reference_table: str,
    reference_id: UUID,
    action_type: FeeAuditAction,
    old_value: Optional[dict],
    new_value: Optional[dict],
    changed_by: Optional[UUID],
) -> None:
    """Append one audit log entry. Caller must commit."""
    entry = FeeAuditLog(
        reference_table=reference_table,
        reference_id=reference_id,
        action_type=action_type.value,
        old_value=old_value,
        new_value=new_value,
        changed_by=changed_by,
    )
    db.add(entry)
