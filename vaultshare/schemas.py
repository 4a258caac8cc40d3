from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AccessRequest(BaseModel):
    vaultFileId: str | None = None
    shareToken: str | None = None
    expiresIn: int | None = None


class AccessResponse(BaseModel):
    signedUrl: str
    originalName: str | None
    vaultId: str
    expiresIn: int


class TokenRequest(BaseModel):
    token: str | None = None


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    original_name: str | None
    size_bytes: int
    sort_index: int
    created_at: datetime


class VaultSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    is_public: bool
    created_at: datetime


class VaultOut(VaultSummary):
    allow_downloads: bool


class OwnedVaultOut(VaultOut):
    share_token: str | None
    owner_id: str


class VaultWithFiles(BaseModel):
    vault: VaultOut
    files: list[FileOut]


class OwnedVaultWithFiles(BaseModel):
    vault: OwnedVaultOut
    files: list[FileOut]
    used_bytes: int
    quota_bytes: int


class VaultCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    is_public: bool = False
    allow_downloads: bool = False


class VaultUpdate(BaseModel):
    is_public: bool | None = None
    allow_downloads: bool | None = None


class ReorderRequest(BaseModel):
    fileIds: list[str]
