from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from vaultshare.database import get_db
from vaultshare.dependencies import get_current_user_id
from vaultshare.errors import QuotaExceeded
from vaultshare.schemas import (
    FileOut,
    OwnedVaultOut,
    OwnedVaultWithFiles,
    ReorderRequest,
    VaultCreate,
    VaultOut,
    VaultSummary,
    VaultUpdate,
    VaultWithFiles,
)
from vaultshare.services.object_store import ObjectStore, get_object_store
from vaultshare.services.vault_service import SEARCH_LIMIT_DEFAULT, VAULT_QUOTA_BYTES, VaultService

router = APIRouter(prefix="/vaults", tags=["vaults"])


def owned_view(service: VaultService, vault) -> OwnedVaultWithFiles:
    return OwnedVaultWithFiles(
        vault=OwnedVaultOut.model_validate(vault),
        files=[FileOut.model_validate(f) for f in service.list_files(vault.id)],
        used_bytes=service.used_bytes(vault.id),
        quota_bytes=VAULT_QUOTA_BYTES,
    )


@router.post("", response_model=OwnedVaultOut, status_code=201)
def create_vault(
    body: VaultCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return VaultService(db).create_vault(
        owner_id=user_id,
        name=body.name,
        description=body.description,
        is_public=body.is_public,
        allow_downloads=body.allow_downloads,
    )


@router.get("", response_model=list[OwnedVaultOut])
def list_my_vaults(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return VaultService(db).list_owned(user_id)


# Declared before /{vault_id} so the literal paths win
@router.get("/search", response_model=list[VaultSummary])
def search_vaults(
    q: str = Query(default=""),
    limit: int = Query(default=SEARCH_LIMIT_DEFAULT),
    db: Session = Depends(get_db),
):
    return VaultService(db).search_by_name(q, limit)


@router.get("/public/{name}", response_model=VaultWithFiles)
def public_vault_by_name(name: str, db: Session = Depends(get_db)):
    vault, files = VaultService(db).find_public_by_name(name)
    return VaultWithFiles(
        vault=VaultOut.model_validate(vault),
        files=[FileOut.model_validate(f) for f in files],
    )


@router.get("/{vault_id}", response_model=OwnedVaultWithFiles)
def get_vault(
    vault_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    service = VaultService(db)
    return owned_view(service, service.get_owned(user_id, vault_id))


@router.patch("/{vault_id}", response_model=OwnedVaultOut)
def update_vault(
    vault_id: str,
    body: VaultUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return VaultService(db).update_settings(
        user_id,
        vault_id,
        is_public=body.is_public,
        allow_downloads=body.allow_downloads,
    )


@router.post("/{vault_id}/files", response_model=FileOut, status_code=201)
async def upload_file(
    vault_id: str,
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
):
    # Reject bodies that can never fit before buffering them
    if file.size is not None and file.size > VAULT_QUOTA_BYTES:
        raise QuotaExceeded()
    content = await file.read()
    return VaultService(db, object_store).upload_file(
        owner_id=user_id,
        vault_id=vault_id,
        filename=file.filename,
        content_type=file.content_type,
        content=content,
    )


@router.delete("/{vault_id}/files/{file_id}")
def delete_file(
    vault_id: str,
    file_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
):
    record = VaultService(db, object_store).delete_file(user_id, vault_id, file_id)
    return {"status": "deleted", "id": record.id}


@router.put("/{vault_id}/order", response_model=list[FileOut])
def reorder_files(
    vault_id: str,
    body: ReorderRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return VaultService(db).reorder_files(user_id, vault_id, body.fileIds)
