"""FileRecord model - PDF metadata (actual bytes live in the blob directory)."""
from datetime import datetime
from sqlalchemy import String, BigInteger
from sqlalchemy.orm import Mapped, mapped_column
from docbrain.models.base import Base, UTCDateTime


class FileRecord(Base):
    __tablename__ = "pdfs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    original_name: Mapped[str] = mapped_column(String(500), nullable=False)
    stored_name: Mapped[str] = mapped_column("stored_filename", String(1000), nullable=False)
    size_bytes: Mapped[int] = mapped_column("file_size", BigInteger, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        "upload_date", UTCDateTime(), nullable=False, index=True
    )
    content_type: Mapped[str] = mapped_column("mime_type", String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<FileRecord {self.id} {self.original_name!r}>"
