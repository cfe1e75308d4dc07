import uuid
from datetime import datetime, timedelta, timezone

import pytest

from docbrain.exceptions import DuplicateKeyError, RecordNotFoundError
from docbrain.models.file_record import FileRecord


def _record(name="a.pdf", uploaded_at=None, record_id=None):
    record_id = record_id or str(uuid.uuid4())
    return FileRecord(
        id=record_id,
        original_name=name,
        stored_name=f"{record_id}-{name}",
        size_bytes=10,
        uploaded_at=uploaded_at or datetime.now(timezone.utc),
        content_type="application/pdf",
    )


@pytest.mark.asyncio
async def test_insert_then_get(store):
    record = await store.insert(_record("report.pdf"))

    fetched = await store.get_by_id(record.id)
    assert fetched.original_name == "report.pdf"
    assert fetched.stored_name == f"{record.id}-report.pdf"
    assert fetched.size_bytes == 10
    assert fetched.content_type == "application/pdf"


@pytest.mark.asyncio
async def test_get_unknown_id_raises(store):
    with pytest.raises(RecordNotFoundError):
        await store.get_by_id("does-not-exist")
    assert await store.find_by_id("does-not-exist") is None


@pytest.mark.asyncio
async def test_duplicate_id_is_rejected(store):
    first = await store.insert(_record())
    store.db.expunge_all()

    with pytest.raises(DuplicateKeyError):
        await store.insert(_record(record_id=first.id))
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_list_all_is_newest_first(store):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    await store.insert(_record("middle.pdf", base + timedelta(minutes=1)))
    await store.insert(_record("oldest.pdf", base))
    await store.insert(_record("newest.pdf", base + timedelta(minutes=2)))

    names = [r.original_name for r in await store.list_all()]
    assert names == ["newest.pdf", "middle.pdf", "oldest.pdf"]


@pytest.mark.asyncio
async def test_list_all_empty(store):
    assert await store.list_all() == []
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_delete_by_id(store):
    record = await store.insert(_record())

    await store.delete_by_id(record.id)
    assert await store.find_by_id(record.id) is None

    # Absent ids are a no-op
    await store.delete_by_id(record.id)


@pytest.mark.asyncio
async def test_upload_date_reads_back_as_utc(store):
    local = timezone(timedelta(hours=5, minutes=30))
    written = datetime(2024, 3, 1, 17, 30, tzinfo=local)
    record = await store.insert(_record(uploaded_at=written))
    store.db.expire_all()

    fetched = await store.get_by_id(record.id)
    assert fetched.uploaded_at.utcoffset() == timedelta(0)
    assert fetched.uploaded_at == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_count(store):
    assert await store.count() == 0
    await store.insert(_record("a.pdf"))
    await store.insert(_record("b.pdf"))
    assert await store.count() == 2
