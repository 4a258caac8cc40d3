"""
File access policy: owner, public vault, or private vault with share token.

A denial looks the same whether the file is missing, soft-deleted or simply
not shared with the caller.
"""

import enum
import logging
import re
import secrets
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vaultshare.errors import UpstreamFailure, ValidationError
from vaultshare.models import Vault, VaultFile

logger = logging.getLogger("vaultshare.access")

FILE_ID_PATTERN = re.compile(r"^[0-9a-f-]{36}$", re.IGNORECASE)


class Action(str, enum.Enum):
    VIEW = "view"
    DOWNLOAD = "download"


@dataclass(frozen=True)
class AccessGrant:
    allowed: bool
    storage_path: str | None = None
    original_name: str | None = None
    vault_id: str | None = None


DENIED = AccessGrant(allowed=False)


def validate_file_id(vault_file_id: str | None) -> str:
    candidate = (vault_file_id or "").strip()
    if not FILE_ID_PATTERN.match(candidate):
        raise ValidationError("Invalid vaultFileId.")
    return candidate


def normalize_share_token(share_token: str | None) -> str | None:
    if share_token is None:
        return None
    return share_token.strip() or None


def tokens_match(supplied: str | None, current: str | None) -> bool:
    if supplied is None or current is None:
        return False
    return secrets.compare_digest(supplied.encode(), current.encode())


def is_permitted(
    action: Action,
    vault: Vault,
    file: VaultFile,
    requesting_user: str | None,
    share_token: str | None,
) -> bool:
    if file.is_deleted:
        return False
    if requesting_user is not None and requesting_user == vault.owner_id:
        return True
    if vault.is_public:
        reachable = True
    else:
        reachable = tokens_match(share_token, vault.share_token)
    if not reachable:
        return False
    if action is Action.DOWNLOAD:
        return bool(vault.allow_downloads)
    return True


class AccessAuthorizer:
    def __init__(self, db_session: Session):
        self.db_session = db_session

    def authorize(
        self,
        action: Action,
        requesting_user: str | None,
        vault_file_id: str | None,
        share_token: str | None = None,
    ) -> AccessGrant:
        file_id = validate_file_id(vault_file_id)
        token = normalize_share_token(share_token)

        try:
            row = (
                self.db_session.query(VaultFile, Vault)
                .join(Vault, Vault.id == VaultFile.vault_id)
                .filter(VaultFile.id == file_id.lower())
                .first()
            )
        except SQLAlchemyError:
            logger.exception("Authorization lookup failed for %s", file_id)
            raise UpstreamFailure()

        if row is None:
            return DENIED
        file, vault = row
        if not is_permitted(action, vault, file, requesting_user, token):
            logger.info(
                "Denied %s of %s | user=%s | token=%s",
                action.value, file_id, requesting_user or "anonymous", token is not None,
            )
            return DENIED
        return AccessGrant(
            allowed=True,
            storage_path=file.storage_path,
            original_name=file.original_name,
            vault_id=vault.id,
        )

    def authorize_view(self, requesting_user, vault_file_id, share_token=None) -> AccessGrant:
        return self.authorize(Action.VIEW, requesting_user, vault_file_id, share_token)

    def authorize_download(self, requesting_user, vault_file_id, share_token=None) -> AccessGrant:
        return self.authorize(Action.DOWNLOAD, requesting_user, vault_file_id, share_token)
