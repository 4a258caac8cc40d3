from fastapi import Header

from vaultshare.errors import AuthenticationRequired
from vaultshare.services.identity import resolve_identity


def get_current_user_id(authorization: str | None = Header(default=None)) -> str:
    user_id = resolve_identity(authorization)
    if user_id is None:
        raise AuthenticationRequired()
    return user_id
