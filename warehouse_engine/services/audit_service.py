import logging
import uuid
from typing import Optional, Dict, Any, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.models.audit_log import AuditLog


logger = logging.getLogger(__name__)


class AuditService:
    """
    Audit sink for warehouse operations.

    ``record`` is best-effort: the entry is written inside a savepoint and
    any failure is logged and dropped so the business operation still
    commits.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> AuditLog:
        """
        Create an audit log entry.

        Args:
            action: The action performed (BLIND_COUNT, ASSIGN_ROUTE, etc.)
            entity_type: Type of entity (RECEPTION_ORDER, LOT, ROUTE, etc.)
            entity_id: ID of the affected entity
            user_id: ID of the user performing the action
            old_values: Previous values (for updates)
            new_values: New values (for creates/updates)
            description: Human-readable description

        Returns:
            The created AuditLog entry
        """
        audit_log = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            old_values=old_values,
            new_values=new_values,
            description=description,
        )
        self.db.add(audit_log)
        await self.db.flush()
        return audit_log

    async def record(
        self,
        user_id: Optional[uuid.UUID],
        action: str,
        entity_type: str,
        entity_id: Optional[uuid.UUID] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """Write an audit entry in its own savepoint. Returns None if it could not be written."""
        try:
            async with self.db.begin_nested():
                return await self.log(
                    action=action,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    user_id=user_id,
                    old_values=old_values,
                    new_values=new_values,
                    description=description,
                )
        except Exception as e:
            logger.warning(f"Audit entry {action} for {entity_type} {entity_id} not written: {e}")
            return None

    async def get_audit_logs(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[uuid.UUID] = None,
        action: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[List[AuditLog], int]:
        """
        Get audit logs with filtering and pagination.

        Returns:
            Tuple of (list of audit logs, total count)
        """
        stmt = select(AuditLog).order_by(AuditLog.created_at.desc())

        if entity_type:
            stmt = stmt.where(AuditLog.entity_type == entity_type)
        if entity_id:
            stmt = stmt.where(AuditLog.entity_id == entity_id)
        if action:
            stmt = stmt.where(AuditLog.action == action)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = stmt.offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total
