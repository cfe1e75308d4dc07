"""Shared fixtures: an isolated SQLite database and blob directory per test."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from docbrain.config import Settings
from docbrain.database import build_engine, build_session_factory, create_tables
from docbrain.main import create_app
from docbrain.repositories.file_records import FileRecordStore
from docbrain.services.blob_storage import BlobStore

PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<<>>\nendobj\n%%EOF\n"


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'docbrain.db'}",
        FILE_STORAGE_PATH=str(tmp_path / "uploads"),
        CORS_ORIGINS="http://localhost:3000, https://docbrain.example.com",
        MAX_UPLOAD_BYTES=1024,
    )


@pytest.fixture()
def blob_store(settings):
    return BlobStore(settings.FILE_STORAGE_PATH)


@pytest_asyncio.fixture()
async def store(settings):
    engine = build_engine(settings)
    await create_tables(engine)
    async with build_session_factory(engine)() as session:
        yield FileRecordStore(session)
    await engine.dispose()


@pytest_asyncio.fixture()
async def app(settings):
    app = create_app(settings)
    await create_tables(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def upload(client, name="a.pdf", content=PDF_BYTES, content_type="application/pdf"):
    return await client.post("/api/upload", files={"pdf": (name, content, content_type)})
