"""Upload, query, download and delete PDFs.

Every operation touches at most one blob and one metadata row. The two
steps of upload (blob, then record) and delete (blob, then record) are
sequenced but not atomic; see ``docbrain.services.reconcile`` for the
on-demand cleanup of whatever a crash between them leaves behind.
"""
import logging
import uuid
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timezone

from docbrain.exceptions import InvalidFileTypeError, PayloadTooLargeError
from docbrain.models.file_record import FileRecord
from docbrain.repositories.file_records import FileRecordStore
from docbrain.services.blob_storage import BlobStore

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


@dataclass(frozen=True)
class DownloadTarget:
    chunks: AsyncIterator[bytes]
    filename: str
    media_type: str


class DocumentService:

    def __init__(self, store: FileRecordStore, blobs: BlobStore, max_upload_bytes: int):
        self.store = store
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes

    async def upload(
        self,
        original_name: str,
        content_type: str | None,
        data: bytes | AsyncIterable[bytes],
        declared_size: int | None = None,
    ) -> FileRecord:
        """Store a PDF and record it.

        The type check runs before anything touches the disk. The size
        ceiling is checked against ``declared_size`` up front when the
        transport knows it, and enforced again while the bytes are copied.
        """
        if content_type != PDF_MIME_TYPE:
            raise InvalidFileTypeError()
        if declared_size is not None and declared_size > self.max_upload_bytes:
            raise PayloadTooLargeError(self.max_upload_bytes)

        file_id = str(uuid.uuid4())
        stored_name = self.blobs.make_name(file_id, original_name)
        size = await self.blobs.write(stored_name, data, max_bytes=self.max_upload_bytes)

        record = FileRecord(
            id=file_id,
            original_name=original_name,
            stored_name=stored_name,
            size_bytes=size,
            uploaded_at=datetime.now(timezone.utc),
            content_type=content_type,
        )
        try:
            record = await self.store.insert(record)
        except Exception:
            # No record points at this blob; drop it rather than leave an orphan
            await self.blobs.delete(stored_name)
            raise

        logger.info("Uploaded %s as %s (%d bytes)", original_name, file_id, size)
        return record

    async def list_all(self) -> list[FileRecord]:
        return await self.store.list_all()

    async def get(self, record_id: str) -> FileRecord:
        return await self.store.get_by_id(record_id)

    async def resolve_download(self, record_id: str) -> DownloadTarget:
        """Open the bytes for ``record_id``. A missing blob is reported as not found.

        The blob is opened here, so a delete that lands after this returns
        cannot turn the download into a server error.
        """
        record = await self.store.get_by_id(record_id)
        chunks = await self.blobs.stream(record.stored_name)
        return DownloadTarget(
            chunks=chunks,
            filename=record.original_name,
            media_type=record.content_type or "application/octet-stream",
        )

    async def delete(self, record_id: str) -> None:
        """Remove the blob (if still there), then the record."""
        record = await self.store.get_by_id(record_id)
        removed = await self.blobs.delete(record.stored_name)
        if not removed:
            logger.warning("Blob %s for %s was already missing", record.stored_name, record_id)
        await self.store.delete_by_id(record_id)
        logger.info("Deleted %s (%s)", record_id, record.original_name)
