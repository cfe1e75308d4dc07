import pytest

from docbrain.exceptions import (
    BlobNotFoundError,
    InvalidFileTypeError,
    PayloadTooLargeError,
    RecordNotFoundError,
)
from docbrain.services.documents import DocumentService

from conftest import PDF_BYTES


async def _chunks(*parts):
    for part in parts:
        yield part


@pytest.fixture()
def service(store, blob_store):
    return DocumentService(store, blob_store, max_upload_bytes=100)


@pytest.mark.asyncio
async def test_upload_writes_blob_then_record(service, blob_store):
    record = await service.upload("a.pdf", "application/pdf", PDF_BYTES)

    assert record.size_bytes == len(PDF_BYTES)
    assert record.stored_name == f"{record.id}-a.pdf"
    assert await blob_store.read(record.stored_name) == PDF_BYTES
    assert (await service.get(record.id)).original_name == "a.pdf"


@pytest.mark.asyncio
async def test_size_is_what_was_written(service):
    record = await service.upload("a.pdf", "application/pdf", _chunks(b"1234", b"567"))
    assert record.size_bytes == 7


@pytest.mark.asyncio
async def test_non_pdf_never_touches_disk(service, blob_store, store):
    with pytest.raises(InvalidFileTypeError):
        await service.upload("notes.txt", "text/plain", b"hello")

    assert not blob_store.base_path.exists()
    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_declared_size_over_limit_rejected_up_front(service, blob_store):
    with pytest.raises(PayloadTooLargeError):
        await service.upload("big.pdf", "application/pdf", b"x" * 10, declared_size=101)
    assert not blob_store.base_path.exists()


@pytest.mark.asyncio
async def test_oversized_stream_aborts_without_record(service, blob_store, store):
    with pytest.raises(PayloadTooLargeError):
        await service.upload("big.pdf", "application/pdf", _chunks(b"x" * 60, b"y" * 60))

    assert await blob_store.list_names() == []
    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_failed_insert_removes_the_blob(service, blob_store, monkeypatch):
    async def broken_insert(record):
        raise RuntimeError("database is down")

    monkeypatch.setattr(service.store, "insert", broken_insert)

    with pytest.raises(RuntimeError):
        await service.upload("a.pdf", "application/pdf", PDF_BYTES)
    assert await blob_store.list_names() == []


@pytest.mark.asyncio
async def test_download_target_uses_original_name(service):
    record = await service.upload("Quarterly Report.pdf", "application/pdf", PDF_BYTES)

    target = await service.resolve_download(record.id)
    assert target.filename == "Quarterly Report.pdf"
    assert target.media_type == "application/pdf"
    assert b"".join([c async for c in target.chunks]) == PDF_BYTES


@pytest.mark.asyncio
async def test_download_with_missing_blob_is_not_found(service, blob_store):
    record = await service.upload("a.pdf", "application/pdf", PDF_BYTES)
    await blob_store.delete(record.stored_name)

    with pytest.raises(BlobNotFoundError):
        await service.resolve_download(record.id)


@pytest.mark.asyncio
async def test_delete_tolerates_missing_blob(service, blob_store):
    record = await service.upload("a.pdf", "application/pdf", PDF_BYTES)
    await blob_store.delete(record.stored_name)

    await service.delete(record.id)
    with pytest.raises(RecordNotFoundError):
        await service.get(record.id)


@pytest.mark.asyncio
async def test_delete_unknown_id_touches_nothing(service, blob_store):
    record = await service.upload("a.pdf", "application/pdf", PDF_BYTES)

    with pytest.raises(RecordNotFoundError):
        await service.delete("does-not-exist")
    assert await blob_store.exists(record.stored_name)


@pytest.mark.asyncio
async def test_download_survives_delete_after_resolve(service, blob_store):
    record = await service.upload("a.pdf", "application/pdf", PDF_BYTES)

    target = await service.resolve_download(record.id)
    await service.delete(record.id)

    assert b"".join([c async for c in target.chunks]) == PDF_BYTES
    assert await blob_store.list_names() == []
