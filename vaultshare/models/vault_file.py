import uuid
from datetime import datetime, timezone
from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String
from vaultshare.database import Base


class VaultFile(Base):
    __tablename__ = "vault_files"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vault_id = Column(String(36), ForeignKey("vaults.id"), index=True, nullable=False)
    owner_id = Column(String(36), nullable=False)
    uploaded_by = Column(String(36), nullable=False)
    storage_path = Column(String(512), unique=True, nullable=False)
    original_name = Column(String(255), nullable=True)
    content_type = Column(String(255), nullable=True)
    size_bytes = Column(BigInteger, nullable=False)
    sort_index = Column(Integer, default=0, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    deleted_by = Column(String(36), nullable=True)
    storage_purged_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
