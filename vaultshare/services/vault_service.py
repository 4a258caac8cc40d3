import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from vaultshare.errors import (
    AuthorizationDenied,
    Conflict,
    NotFound,
    QuotaExceeded,
    UnsupportedMediaType,
    UpstreamFailure,
    ValidationError,
)
from vaultshare.models import Vault, VaultFile
from vaultshare.models.vault import new_share_token
from vaultshare.services.object_store import ObjectStore, ObjectStoreError

logger = logging.getLogger("vaultshare.vaults")

VAULT_QUOTA_BYTES = 30 * 1024 * 1024
MIN_SHARE_TOKEN_LENGTH = 16
SEARCH_LIMIT_DEFAULT = 20
SEARCH_LIMIT_MAX = 50

ALLOWED_CONTENT_TYPES = frozenset({
    "application/pdf",
    "image/png",
    "image/jpeg",
    "image/webp",
    "text/plain",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})


def storage_path_for(owner_id: str, vault_id: str, filename: str | None) -> str:
    extension = "bin"
    if filename and "." in filename:
        extension = filename.rsplit(".", 1)[1] or "bin"
    return f"{owner_id}/{vault_id}/{uuid.uuid4()}.{extension}"


class VaultService:
    def __init__(self, db_session: Session, object_store: ObjectStore | None = None):
        self.db_session = db_session
        self.object_store = object_store

    # Vaults

    def create_vault(
        self, *, owner_id: str, name: str, description: str | None = None,
        is_public: bool = False, allow_downloads: bool = False,
    ) -> Vault:
        name = name.strip()
        if not name:
            raise ValidationError("Vault name is required.")
        vault = Vault(
            owner_id=owner_id,
            name=name,
            description=(description or "").strip() or None,
            is_public=is_public,
            allow_downloads=allow_downloads,
            share_token=None if is_public else new_share_token(),
        )
        self.db_session.add(vault)
        try:
            self.db_session.commit()
        except IntegrityError:
            self.db_session.rollback()
            raise Conflict("A vault with this name already exists.")
        except SQLAlchemyError:
            self.db_session.rollback()
            logger.exception("Vault insert failed")
            raise UpstreamFailure()
        self.db_session.refresh(vault)
        logger.info("Vault %s created by %s", vault.id, owner_id)
        return vault

    def list_owned(self, owner_id: str) -> list[Vault]:
        return (
            self.db_session.query(Vault)
            .filter(Vault.owner_id == owner_id)
            .order_by(Vault.created_at.desc())
            .all()
        )

    def get_owned(self, owner_id: str, vault_id: str, *, for_update: bool = False) -> Vault:
        query = self.db_session.query(Vault).filter(Vault.id == vault_id, Vault.owner_id == owner_id)
        if for_update:
            query = query.with_for_update()
        vault = query.first()
        if vault is None:
            raise NotFound("Vault not found.")
        return vault

    def update_settings(
        self, owner_id: str, vault_id: str, *,
        is_public: bool | None = None, allow_downloads: bool | None = None,
    ) -> Vault:
        vault = self.get_owned(owner_id, vault_id)
        if is_public is not None:
            vault.set_visibility(is_public)
        if allow_downloads is not None:
            vault.allow_downloads = allow_downloads
        self._commit("Vault update failed")
        self.db_session.refresh(vault)
        return vault

    # Files

    def list_files(self, vault_id: str) -> list[VaultFile]:
        return (
            self.db_session.query(VaultFile)
            .filter(VaultFile.vault_id == vault_id, VaultFile.deleted_at.is_(None))
            .order_by(VaultFile.sort_index.asc(), VaultFile.created_at.asc())
            .all()
        )

    def used_bytes(self, vault_id: str) -> int:
        total = (
            self.db_session.query(func.coalesce(func.sum(VaultFile.size_bytes), 0))
            .filter(VaultFile.vault_id == vault_id, VaultFile.deleted_at.is_(None))
            .scalar()
        )
        return int(total or 0)

    def upload_file(
        self, *, owner_id: str, vault_id: str, filename: str | None,
        content_type: str | None, content: bytes,
    ) -> VaultFile:
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise UnsupportedMediaType()

        # Row lock on the vault serialises concurrent uploads for the quota check
        vault = self.get_owned(owner_id, vault_id, for_update=True)
        size = len(content)
        if self.used_bytes(vault.id) + size > VAULT_QUOTA_BYTES:
            self.db_session.rollback()
            raise QuotaExceeded()

        storage_path = storage_path_for(owner_id, vault.id, filename)
        try:
            self.object_store.put(storage_path, content, content_type)
        except ObjectStoreError as exc:
            self.db_session.rollback()
            logger.error("Upload to object store failed: %s", exc)
            raise UpstreamFailure("Upload failed. Please retry.")

        record = VaultFile(
            vault_id=vault.id,
            owner_id=owner_id,
            uploaded_by=owner_id,
            storage_path=storage_path,
            original_name=filename,
            content_type=content_type,
            size_bytes=size,
            sort_index=len(self.list_files(vault.id)),
        )
        self.db_session.add(record)
        try:
            self.db_session.commit()
        except SQLAlchemyError:
            self.db_session.rollback()
            logger.exception("File insert failed for %s", storage_path)
            self._remove_object(storage_path)
            raise UpstreamFailure("Upload failed. Please retry.")
        self.db_session.refresh(record)
        return record

    def delete_file(self, owner_id: str, vault_id: str, file_id: str) -> VaultFile:
        vault = self.get_owned(owner_id, vault_id)
        record = (
            self.db_session.query(VaultFile)
            .filter(
                VaultFile.id == file_id,
                VaultFile.vault_id == vault.id,
                VaultFile.deleted_at.is_(None),
            )
            .first()
        )
        if record is None:
            raise NotFound("File not found.")

        record.deleted_at = datetime.now(timezone.utc)
        record.deleted_by = owner_id
        self._commit("File delete failed")

        # Bytes go best-effort; the purge task retries whatever is left
        if self._remove_object(record.storage_path):
            record.storage_purged_at = datetime.now(timezone.utc)
            try:
                self.db_session.commit()
            except SQLAlchemyError as exc:
                # Delete already took effect; the purge task sets the marker later
                self.db_session.rollback()
                logger.warning("Purge marker update failed for %s: %s", record.storage_path, exc)
        return record

    def reorder_files(self, owner_id: str, vault_id: str, file_ids: list[str]) -> list[VaultFile]:
        vault = self.get_owned(owner_id, vault_id)
        files = {f.id: f for f in self.list_files(vault.id)}
        if len(file_ids) != len(set(file_ids)) or set(file_ids) != set(files):
            raise ValidationError("Order must list every file in the vault exactly once.")
        for index, file_id in enumerate(file_ids):
            files[file_id].sort_index = index
        self._commit("Reorder failed")
        return self.list_files(vault.id)

    # Lookups

    def lookup_by_share_token(self, token: str | None) -> tuple[Vault, list[VaultFile]]:
        token = (token or "").strip()
        if len(token) < MIN_SHARE_TOKEN_LENGTH:
            raise ValidationError("Invalid token.")
        try:
            vault = self.db_session.query(Vault).filter(Vault.share_token == token).first()
            if vault is None:
                raise AuthorizationDenied("Access denied.")
            return vault, self.list_files(vault.id)
        except SQLAlchemyError:
            logger.exception("Token lookup failed")
            raise UpstreamFailure()

    def find_public_by_name(self, name: str) -> tuple[Vault, list[VaultFile]]:
        vault = (
            self.db_session.query(Vault)
            .filter(Vault.name == name, Vault.is_public.is_(True))
            .first()
        )
        if vault is None:
            raise NotFound("Vault not found.")
        return vault, self.list_files(vault.id)

    def search_by_name(self, fragment: str, limit: int = SEARCH_LIMIT_DEFAULT) -> list[Vault]:
        fragment = fragment.strip()
        if not fragment:
            return []
        limit = min(max(limit, 1), SEARCH_LIMIT_MAX)
        escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return (
            self.db_session.query(Vault)
            .filter(Vault.name.ilike(f"%{escaped}%", escape="\\"))
            .order_by(Vault.name.asc())
            .limit(limit)
            .all()
        )

    def _commit(self, failure: str) -> None:
        try:
            self.db_session.commit()
        except SQLAlchemyError:
            self.db_session.rollback()
            logger.exception(failure)
            raise UpstreamFailure()

    def _remove_object(self, storage_path: str) -> bool:
        try:
            self.object_store.remove(storage_path)
        except ObjectStoreError as exc:
            logger.warning("Storage delete error: %s", exc)
            return False
        return True
