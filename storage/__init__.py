"""Local persistent storage and the local-to-server data migration."""

from .db import LocalStore
from .migration import MigrationResult, dismiss_migration, is_migration_needed, migrate_local_data

__all__ = ["LocalStore", "MigrationResult", "dismiss_migration", "is_migration_needed", "migrate_local_data"]
