"""Per-prefix, per-day document numbers."""
from datetime import datetime, timezone

from warehouse_engine.models.document_sequence import DocumentType
from warehouse_engine.services.document_sequence_service import DocumentSequenceService


class TestDocumentSequence:
    async def test_numbers_are_sequential_per_day(self, db):
        service = DocumentSequenceService(db)
        when = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)

        first = await service.get_next_number(DocumentType.ORDER.value, when)
        second = await service.get_next_number(DocumentType.ORDER.value, when)

        assert first == "ORD-20260314-0001"
        assert second == "ORD-20260314-0002"

    async def test_prefixes_and_days_count_independently(self, db):
        service = DocumentSequenceService(db)
        day_one = datetime(2026, 3, 14, tzinfo=timezone.utc)
        day_two = datetime(2026, 3, 15, tzinfo=timezone.utc)

        await service.get_next_number(DocumentType.ORDER.value, day_one)

        assert await service.get_next_number(DocumentType.ROUTE.value, day_one) == "RTA-20260314-0001"
        assert await service.get_next_number(DocumentType.ORDER.value, day_two) == "ORD-20260315-0001"

    async def test_preview_does_not_consume(self, db):
        service = DocumentSequenceService(db)
        when = datetime(2026, 3, 14, tzinfo=timezone.utc)

        assert await service.preview_next_number("REC", when) == "REC-20260314-0001"
        assert await service.preview_next_number("REC", when) == "REC-20260314-0001"
        assert await service.get_next_number("REC", when) == "REC-20260314-0001"
        assert await service.preview_next_number("REC", when) == "REC-20260314-0002"
