"""
Persistence Layer

Storage port and its adapters:
- KeyValueAccountStore: whole aggregate per write (Redis or in-memory)
- RelationalAccountStore: normalized tables, one call per sub-entity
- migrate_accounts: best-effort copy between stores
"""

from .ports import AccountRepository, BatchResult
from .key_value import KeyValueAccountStore
from .relational import RelationalAccountStore
from .migration import MigrationProgress, MigrationReport, migrate_accounts, migration_summary


def create_repository(config=None) -> AccountRepository:
    """Build the repository selected by StorageConfig.backend."""
    from ...config.settings import StorageBackendType, get_settings
    config = config or get_settings().storage
    if config.backend == StorageBackendType.RELATIONAL:
        return RelationalAccountStore.from_settings(config)
    return KeyValueAccountStore.from_settings(config)


__all__ = [
    "AccountRepository",
    "BatchResult",
    "KeyValueAccountStore",
    "RelationalAccountStore",
    "MigrationProgress",
    "MigrationReport",
    "migrate_accounts",
    "migration_summary",
    "create_repository"
]
