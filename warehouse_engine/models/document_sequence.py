"""
Document Sequence Model for Atomic Number Generation

Daily numbering, one counter row per prefix and calendar day.

DOCUMENT FORMATS:
    REC: REC-20260315-0001  (Reception order)
    ORD: ORD-20260315-0001  (Outbound order)
    RTA: RTA-20260315-0001  (Delivery route)
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import String, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from warehouse_engine.database import Base
from warehouse_engine.db_types import UUIDType


class DocumentType(str, Enum):
    """Document types that use sequence numbering."""
    RECEPTION_ORDER = "REC"
    ORDER = "ORD"
    ROUTE = "RTA"


class DocumentSequence(Base):
    """
    Per-day counter for a document prefix.

    Example:
        prefix = "ORD"
        date_key = "20260315"
        current_number = 41
        -> Next number: ORD-20260315-0042
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        UniqueConstraint("prefix", "date_key", name="uq_document_prefix_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    prefix: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        index=True,
        comment="REC, ORD, RTA"
    )
    date_key: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        comment="YYYYMMDD"
    )
    current_number: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Last used sequence number"
    )
    padding_length: Mapped[int] = mapped_column(Integer, default=4, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def get_next_number(self) -> str:
        """
        Increment the counter and format the next number.

        Does NOT flush; the caller owns the transaction.
        """
        self.current_number += 1
        seq = str(self.current_number).zfill(self.padding_length or 4)
        return f"{self.prefix}-{self.date_key}-{seq}"

    def preview_next_number(self) -> str:
        seq = str(self.current_number + 1).zfill(self.padding_length or 4)
        return f"{self.prefix}-{self.date_key}-{seq}"

    def __repr__(self) -> str:
        return f"<DocumentSequence({self.prefix}/{self.date_key}: {self.current_number})>"
