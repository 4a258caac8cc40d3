import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, DateTime, String, Text
from vaultshare.database import Base


def new_share_token() -> str:
    return uuid.uuid4().hex


class Vault(Base):
    __tablename__ = "vaults"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(String(36), index=True, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    allow_downloads = Column(Boolean, default=False, nullable=False)
    share_token = Column(String(64), unique=True, index=True, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def set_visibility(self, is_public: bool) -> None:
        """Switch visibility; every transition to private issues a fresh token."""
        if not is_public and (self.is_public or self.share_token is None):
            self.share_token = new_share_token()
        self.is_public = is_public
