"""Metadata store for uploaded PDFs: one row per FileRecord."""
from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docbrain.exceptions import DuplicateKeyError, RecordNotFoundError
from docbrain.models.file_record import FileRecord


class FileRecordStore:
    """Single-row operations over the ``pdfs`` table. Each mutation commits on its own."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, record: FileRecord) -> FileRecord:
        self.db.add(record)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateKeyError(record.id) from e
        await self.db.refresh(record)
        return record

    async def find_by_id(self, record_id: str) -> FileRecord | None:
        result = await self.db.execute(
            select(FileRecord).where(FileRecord.id == record_id)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, record_id: str) -> FileRecord:
        record = await self.find_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def list_all(self) -> list[FileRecord]:
        """All records, newest upload first."""
        result = await self.db.execute(
            select(FileRecord).order_by(desc(FileRecord.uploaded_at))
        )
        return list(result.scalars().all())

    async def delete_by_id(self, record_id: str) -> None:
        """Delete the row if present. Absent ids are a no-op."""
        await self.db.execute(delete(FileRecord).where(FileRecord.id == record_id))
        await self.db.commit()

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(FileRecord))
        return result.scalar_one()
