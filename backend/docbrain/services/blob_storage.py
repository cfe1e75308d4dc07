"""Blob storage on the local filesystem. One flat directory, one file per upload."""
import logging
from collections.abc import AsyncIterable, AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os

from docbrain.exceptions import BlobNotFoundError, PayloadTooLargeError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

# Common filesystem limit on a single path component, in bytes
MAX_NAME_BYTES = 255
MAX_SUFFIX_BYTES = 16


class BlobStore:
    """Reads and writes raw file bytes under ``base_path``.

    The directory is created on first write, not at construction time.
    """

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)

    @staticmethod
    def make_name(file_id: str, original_name: str) -> str:
        """Stored name for an upload: ``{id}-{basename}``.

        Long basenames are cut to fit the filename limit, keeping the extension.
        """
        base = Path(original_name).name
        budget = MAX_NAME_BYTES - len(file_id.encode()) - 1
        if len(base.encode()) > budget:
            suffix = Path(base).suffix
            if len(suffix.encode()) > MAX_SUFFIX_BYTES:
                suffix = ""
            stem = base[: len(base) - len(suffix)] if suffix else base
            room = budget - len(suffix.encode())
            base = stem.encode()[:room].decode("utf-8", errors="ignore") + suffix
        return f"{file_id}-{base}"

    def _path(self, name: str) -> Path:
        return self.base_path / Path(name).name

    async def write(
        self,
        name: str,
        data: bytes | AsyncIterable[bytes],
        max_bytes: int | None = None,
    ) -> int:
        """Write ``data`` under ``name``, replacing any existing file. Returns bytes written.

        Exceeding ``max_bytes`` removes what was written so far and raises
        PayloadTooLargeError. Disk errors remove the partial file and propagate.
        """
        await aiofiles.os.makedirs(self.base_path, exist_ok=True)
        file_path = self._path(name)
        written = 0
        try:
            async with aiofiles.open(file_path, "wb") as f:
                async for chunk in _iter_chunks(data):
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise PayloadTooLargeError(max_bytes)
                    await f.write(chunk)
        except BaseException:
            await self._discard(file_path)
            raise
        logger.debug("Wrote blob %s (%d bytes)", name, written)
        return written

    async def read(self, name: str) -> bytes:
        """Read the whole blob."""
        try:
            async with aiofiles.open(self._path(name), "rb") as f:
                return await f.read()
        except FileNotFoundError:
            raise BlobNotFoundError(name) from None

    async def stream(self, name: str, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Open the blob now and return an iterator over its chunks.

        A blob deleted after this returns is still read to the end from the
        open handle; one deleted before raises BlobNotFoundError here.
        """
        try:
            f = await aiofiles.open(self._path(name), "rb")
        except FileNotFoundError:
            raise BlobNotFoundError(name) from None

        async def _gen():
            try:
                while True:
                    chunk = await f.read(chunk_size)
                    if not chunk:
                        break
                    yield chunk
            finally:
                await f.close()

        return _gen()

    async def exists(self, name: str) -> bool:
        return await aiofiles.os.path.isfile(self._path(name))

    async def modified_at(self, name: str) -> float:
        """Last modification time of the blob, as a POSIX timestamp."""
        try:
            return await aiofiles.os.path.getmtime(self._path(name))
        except FileNotFoundError:
            raise BlobNotFoundError(name) from None

    async def delete(self, name: str) -> bool:
        """Remove the blob. Returns False if it was already gone."""
        file_path = self._path(name)
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            return False
        logger.debug("Deleted blob %s", name)
        return True

    async def list_names(self) -> list[str]:
        """Names of all blobs currently on disk."""
        if not await aiofiles.os.path.isdir(self.base_path):
            return []
        entries = await aiofiles.os.listdir(self.base_path)
        return sorted(e for e in entries if (self.base_path / e).is_file())

    async def _discard(self, file_path: Path) -> None:
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("Could not remove partial blob %s", file_path)


async def _iter_chunks(data: bytes | AsyncIterable[bytes]) -> AsyncIterator[bytes]:
    if isinstance(data, (bytes, bytearray, memoryview)):
        yield bytes(data)
        return
    async for chunk in data:
        yield chunk
