from vaultshare.models.vault import Vault
from vaultshare.models.vault_file import VaultFile

__all__ = ["Vault", "VaultFile"]
