from datetime import datetime, timezone

from vaultshare import cleanup
from vaultshare.cleanup import purge_batch, purge_deleted_objects
from vaultshare.models import VaultFile


def soft_delete(db_session, record, user_id):
    record.deleted_at = datetime.now(timezone.utc)
    record.deleted_by = user_id
    db_session.commit()


def test_purge_removes_bytes_of_soft_deleted_files(db_session, make_vault, make_file, object_store, owner_id):
    vault = make_vault()
    kept = make_file(vault, name="kept.pdf")
    gone = make_file(vault, name="gone.pdf")
    soft_delete(db_session, gone, owner_id)

    purged, failed = purge_batch(db_session, object_store)

    assert (purged, failed) == (1, 0)
    assert gone.storage_path not in object_store.objects
    assert kept.storage_path in object_store.objects
    db_session.expire_all()
    assert db_session.get(VaultFile, gone.id).storage_purged_at is not None
    assert db_session.get(VaultFile, kept.id).storage_purged_at is None


def test_purge_failures_stay_pending(db_session, make_vault, make_file, object_store, owner_id):
    vault = make_vault()
    gone = make_file(vault, name="gone.pdf")
    soft_delete(db_session, gone, owner_id)
    object_store.fail_remove = True

    assert purge_batch(db_session, object_store) == (0, 1)

    object_store.fail_remove = False
    assert purge_batch(db_session, object_store) == (1, 0)
    assert purge_batch(db_session, object_store) == (0, 0)


def test_purge_task_uses_configured_store(db_session, make_vault, make_file, object_store, owner_id, monkeypatch, session_factory):
    vault = make_vault()
    gone = make_file(vault, name="gone.pdf")
    soft_delete(db_session, gone, owner_id)

    monkeypatch.setattr(cleanup, "SessionLocal", session_factory)
    monkeypatch.setattr(cleanup, "get_object_store", lambda: object_store)

    result = purge_deleted_objects.run()

    assert result == {"purged": 1, "failed": 0}
    assert gone.storage_path not in object_store.objects
