"""Find and clean up orphans left by an interrupted upload or delete.

An orphan blob is a file in the blob directory that no record names.
An orphan record is a row whose blob is gone. Nothing runs this on a
schedule; ``docbrain reconcile`` does it on demand.

An upload writes its blob before inserting its record, so a blob without
a record may just be an upload in flight. Blobs younger than ``min_age``
seconds are never reported.
"""
import logging
import time
from dataclasses import dataclass, field

from docbrain.exceptions import BlobNotFoundError
from docbrain.repositories.file_records import FileRecordStore
from docbrain.services.blob_storage import BlobStore

logger = logging.getLogger(__name__)

DEFAULT_MIN_AGE_SECONDS = 300.0


@dataclass
class OrphanReport:
    orphan_blobs: list[str] = field(default_factory=list)
    orphan_records: list[str] = field(default_factory=list)
    skipped_recent: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.orphan_blobs and not self.orphan_records


async def find_orphans(
    store: FileRecordStore,
    blobs: BlobStore,
    min_age: float = DEFAULT_MIN_AGE_SECONDS,
) -> OrphanReport:
    records = await store.list_all()
    on_disk = set(await blobs.list_names())
    referenced = {r.stored_name for r in records}

    report = OrphanReport(
        orphan_records=[r.id for r in records if r.stored_name not in on_disk],
    )
    cutoff = time.time() - min_age
    for name in sorted(on_disk - referenced):
        try:
            mtime = await blobs.modified_at(name)
        except BlobNotFoundError:
            continue
        if mtime > cutoff:
            report.skipped_recent.append(name)
        else:
            report.orphan_blobs.append(name)

    if report.skipped_recent:
        logger.info("Skipped %d unreferenced blob(s) newer than %ss", len(report.skipped_recent), min_age)
    if not report.clean:
        logger.warning(
            "Found %d orphan blob(s) and %d orphan record(s)",
            len(report.orphan_blobs), len(report.orphan_records),
        )
    return report


async def repair(report: OrphanReport, store: FileRecordStore, blobs: BlobStore) -> None:
    """Delete everything listed in ``report``."""
    for name in report.orphan_blobs:
        await blobs.delete(name)
        logger.info("Removed orphan blob %s", name)
    for record_id in report.orphan_records:
        await store.delete_by_id(record_id)
        logger.info("Removed orphan record %s", record_id)
