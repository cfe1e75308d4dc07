"""FastAPI dependencies that hand request handlers their collaborators.

Everything comes off ``app.state``, populated once by ``create_app``.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from docbrain.config import Settings
from docbrain.database import get_db
from docbrain.repositories.file_records import FileRecordStore
from docbrain.services.blob_storage import BlobStore
from docbrain.services.documents import DocumentService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_document_service(
    db: AsyncSession = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
) -> DocumentService:
    return DocumentService(FileRecordStore(db), blobs, settings.MAX_UPLOAD_BYTES)
