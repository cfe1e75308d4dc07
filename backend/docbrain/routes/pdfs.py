"""PDF upload, listing, download and delete routes."""
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse

from docbrain.dependencies import get_document_service
from docbrain.exceptions import MissingFileError
from docbrain.models.file_record import FileRecord
from docbrain.schemas.common import DeleteResponse, ErrorResponse
from docbrain.schemas.file import FileRecordResponse, UploadResponse
from docbrain.services.blob_storage import CHUNK_SIZE
from docbrain.services.documents import DocumentService

router = APIRouter(
    prefix="/api",
    tags=["pdfs"],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
async def upload_pdf(
    pdf: UploadFile | None = File(None),
    service: DocumentService = Depends(get_document_service),
):
    """Upload a PDF and create its record."""
    if pdf is None or not pdf.filename:
        raise MissingFileError()
    try:
        record = await service.upload(
            pdf.filename,
            pdf.content_type,
            _read_chunks(pdf),
            declared_size=pdf.size,
        )
    finally:
        await pdf.close()

    return _to_response(record)


@router.get("/pdfs", response_model=list[FileRecordResponse])
async def list_pdfs(service: DocumentService = Depends(get_document_service)):
    """List all PDFs, newest first."""
    return [_to_response(r) for r in await service.list_all()]


@router.get("/pdfs/{pdf_id}", response_model=FileRecordResponse)
async def get_pdf(
    pdf_id: str,
    service: DocumentService = Depends(get_document_service),
):
    """Get PDF metadata by ID."""
    return _to_response(await service.get(pdf_id))


@router.get("/pdfs/{pdf_id}/download")
async def download_pdf(
    pdf_id: str,
    service: DocumentService = Depends(get_document_service),
):
    """Download a PDF under its original name."""
    target = await service.resolve_download(pdf_id)
    return StreamingResponse(
        target.chunks,
        media_type=target.media_type,
        headers={"Content-Disposition": _content_disposition(target.filename)},
    )


@router.delete("/pdfs/{pdf_id}", response_model=DeleteResponse)
async def delete_pdf(
    pdf_id: str,
    service: DocumentService = Depends(get_document_service),
):
    """Delete a PDF file and its record."""
    await service.delete(pdf_id)
    return DeleteResponse(id=pdf_id)


async def _read_chunks(upload: UploadFile):
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


def _content_disposition(filename: str) -> str:
    """Attachment header; non-ASCII names go in the RFC 5987 ``filename*`` form."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _to_response(record: FileRecord) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": record.id,
        "original_name": record.original_name,
        "file_size": record.size_bytes,
        "upload_date": record.uploaded_at,
        "mime_type": record.content_type,
    }
