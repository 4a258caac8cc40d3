from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from vaultshare.database import get_db
from vaultshare.schemas import AccessRequest, AccessResponse, FileOut, TokenRequest, VaultOut, VaultWithFiles
from vaultshare.services.access_authorizer import AccessAuthorizer, Action, validate_file_id
from vaultshare.services.identity import resolve_identity
from vaultshare.services.object_store import ObjectStore, get_object_store
from vaultshare.services.request_gate import gate
from vaultshare.services.signed_delivery import SignedDeliveryIssuer
from vaultshare.services.vault_service import VaultService

router = APIRouter(prefix="/api", tags=["access"])


def deliver(
    action: Action,
    body: AccessRequest,
    authorization: str | None,
    db: Session,
    object_store: ObjectStore,
) -> AccessResponse:
    file_id = validate_file_id(body.vaultFileId)
    requesting_user = resolve_identity(authorization)

    grant = AccessAuthorizer(db).authorize(action, requesting_user, file_id, body.shareToken)
    delivery = SignedDeliveryIssuer(object_store).issue(grant, body.expiresIn)

    return AccessResponse(
        signedUrl=delivery.signed_url,
        originalName=delivery.original_name,
        vaultId=delivery.vault_id,
        expiresIn=delivery.expires_in,
    )


@router.post("/view", response_model=AccessResponse, dependencies=[Depends(gate("view"))])
def view_file(
    body: AccessRequest,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
):
    return deliver(Action.VIEW, body, authorization, db, object_store)


@router.post("/download", response_model=AccessResponse, dependencies=[Depends(gate("download"))])
def download_file(
    body: AccessRequest,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
):
    return deliver(Action.DOWNLOAD, body, authorization, db, object_store)


@router.post("/vault-by-token", response_model=VaultWithFiles, dependencies=[Depends(gate("token"))])
def vault_by_token(
    body: TokenRequest,
    db: Session = Depends(get_db),
):
    vault, files = VaultService(db).lookup_by_share_token(body.token)
    return VaultWithFiles(
        vault=VaultOut.model_validate(vault),
        files=[FileOut.model_validate(f) for f in files],
    )
