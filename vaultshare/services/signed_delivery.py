import logging
from dataclasses import dataclass

from vaultshare.errors import AuthorizationDenied, DeliveryFailure
from vaultshare.services.access_authorizer import AccessGrant
from vaultshare.services.object_store import ObjectStore, ObjectStoreError

logger = logging.getLogger("vaultshare.delivery")

MIN_EXPIRY_SECONDS = 60
MAX_EXPIRY_SECONDS = 3600
DEFAULT_EXPIRY_SECONDS = 300


def clamp_expiry(requested: int | None) -> int:
    if requested is None:
        return DEFAULT_EXPIRY_SECONDS
    return min(max(int(requested), MIN_EXPIRY_SECONDS), MAX_EXPIRY_SECONDS)


@dataclass(frozen=True)
class SignedDelivery:
    signed_url: str
    original_name: str | None
    vault_id: str
    expires_in: int


class SignedDeliveryIssuer:
    def __init__(self, object_store: ObjectStore):
        self.object_store = object_store

    def issue(self, grant: AccessGrant, requested_expiry: int | None = None) -> SignedDelivery:
        if not grant.allowed or not grant.storage_path:
            raise AuthorizationDenied()

        expires_in = clamp_expiry(requested_expiry)
        try:
            signed_url = self.object_store.presign(grant.storage_path, expires_in)
        except ObjectStoreError as exc:
            logger.error("Signed URL error: %s", exc)
            raise DeliveryFailure()
        if not signed_url:
            raise DeliveryFailure()

        return SignedDelivery(
            signed_url=signed_url,
            original_name=grant.original_name,
            vault_id=grant.vault_id,
            expires_in=expires_in,
        )
