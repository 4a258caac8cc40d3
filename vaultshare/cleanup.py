import logging
import os
from datetime import datetime, timezone

from vaultshare import celery_app
from vaultshare.database import SessionLocal
from vaultshare.models import VaultFile
from vaultshare.services.object_store import ObjectStoreError, get_object_store

logger = logging.getLogger("vaultshare.cleanup")

BATCH_SIZE = int(os.getenv("PURGE_BATCH_SIZE", "500"))


def purge_batch(db, object_store, batch_size: int = BATCH_SIZE) -> tuple[int, int]:
    """Remove bytes of soft-deleted files; returns (purged, failed)."""
    pending = (
        db.query(VaultFile)
        .filter(VaultFile.deleted_at.isnot(None), VaultFile.storage_purged_at.is_(None))
        .order_by(VaultFile.deleted_at.asc())
        .limit(batch_size)
        .all()
    )
    purged = failed = 0
    for record in pending:
        try:
            object_store.remove(record.storage_path)
        except ObjectStoreError as exc:
            logger.warning("Purge failed for %s: %s", record.storage_path, exc)
            failed += 1
            continue
        record.storage_purged_at = datetime.now(timezone.utc)
        purged += 1
    db.commit()
    return purged, failed


@celery_app.task(name="vaultshare.cleanup.purge_deleted_objects")
def purge_deleted_objects():
    object_store = get_object_store()
    total_purged = total_failed = 0
    db = SessionLocal()
    try:
        # Loop until a short batch; failures stay pending for the next run
        while True:
            purged, failed = purge_batch(db, object_store)
            total_purged += purged
            total_failed += failed
            if purged + failed < BATCH_SIZE or purged == 0:
                break
    finally:
        db.close()
    if total_purged or total_failed:
        logger.info("Purged %d objects, %d failed", total_purged, total_failed)
    return {"purged": total_purged, "failed": total_failed}
