"""
Document Sequence Service for Atomic Number Generation

Daily numbering per prefix:
    REC-20260315-0001, ORD-20260315-0001, RTA-20260315-0001

USAGE:
    from warehouse_engine.services.document_sequence_service import DocumentSequenceService

    async def create_order(db: AsyncSession):
        service = DocumentSequenceService(db)
        order_number = await service.get_next_number("ORD")
        # Returns: ORD-20260315-0001
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.models.document_sequence import DocumentSequence, DocumentType


logger = logging.getLogger(__name__)

VALID_PREFIXES = {t.value for t in DocumentType}


class DocumentSequenceService:
    """
    Generates collision-free document numbers.

    Uses SELECT FOR UPDATE on the (prefix, day) counter row so concurrent
    callers are serialized on PostgreSQL. The caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def date_key(when: Optional[datetime] = None) -> str:
        return (when or datetime.now(timezone.utc)).strftime("%Y%m%d")

    async def get_next_number(self, prefix: str, when: Optional[datetime] = None) -> str:
        """
        Get next document number with atomic increment.

        Raises:
            ValueError: If prefix is not a known document type
        """
        prefix = prefix.upper()
        if prefix not in VALID_PREFIXES:
            valid = ", ".join(sorted(VALID_PREFIXES))
            raise ValueError(f"Invalid document prefix '{prefix}'. Valid prefixes: {valid}")

        sequence = await self._get_or_create_sequence(prefix, self.date_key(when))
        doc_number = sequence.get_next_number()
        await self.db.flush()
        return doc_number

    async def preview_next_number(self, prefix: str, when: Optional[datetime] = None) -> str:
        """What the next number would be, without incrementing."""
        prefix = prefix.upper()
        key = self.date_key(when)
        result = await self.db.execute(
            select(DocumentSequence).where(
                DocumentSequence.prefix == prefix,
                DocumentSequence.date_key == key,
            )
        )
        sequence = result.scalar_one_or_none()
        if sequence:
            return sequence.preview_next_number()
        return f"{prefix}-{key}-0001"

    async def _select_locked(self, prefix: str, key: str) -> Optional[DocumentSequence]:
        result = await self.db.execute(
            select(DocumentSequence)
            .where(
                DocumentSequence.prefix == prefix,
                DocumentSequence.date_key == key,
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def _get_or_create_sequence(self, prefix: str, key: str) -> DocumentSequence:
        """
        Get the day's counter with a row lock, creating it on first use.

        A concurrent first insert loses on the unique constraint; the
        savepoint is rolled back and the winner's row is re-read.
        """
        sequence = await self._select_locked(prefix, key)
        if sequence:
            return sequence

        try:
            async with self.db.begin_nested():
                sequence = DocumentSequence(prefix=prefix, date_key=key, current_number=0)
                self.db.add(sequence)
                await self.db.flush()
        except IntegrityError:
            logger.info(f"Sequence {prefix}/{key} created concurrently, re-reading")
            sequence = await self._select_locked(prefix, key)
            if sequence is None:
                raise
            return sequence

        # Re-fetch with lock to ensure atomicity
        return await self._select_locked(prefix, key)
