"""
Bearer credential resolution.

Tokens are HS256 JWTs issued by the identity provider; the user id is the
``sub`` claim. Anything that does not verify resolves to anonymous so that
public and share-token access keeps working.
"""

import logging
import os

from jose import JWTError, jwt

logger = logging.getLogger("vaultshare.identity")

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")


def bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None


def resolve_identity(authorization: str | None) -> str | None:
    token = bearer_token(authorization)
    if token is None:
        return None
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        logger.info("Bearer credential rejected: %s", exc)
        return None
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        return None
    return user_id


def issue_token(user_id: str, **claims) -> str:
    """Sign a credential for ``user_id``; used by local tooling and tests."""
    return jwt.encode({"sub": user_id, **claims}, JWT_SECRET, algorithm=JWT_ALGORITHM)
