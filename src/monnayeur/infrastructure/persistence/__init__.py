"""
Infrastructure persistence package.
"""

from monnayeur.infrastructure.persistence.database import Database
from monnayeur.infrastructure.persistence.migrator import (
    CURRENT_SCHEMA_VERSION,
    MigrationReport,
    SchemaMigrator,
    prepare_schema,
)
from monnayeur.infrastructure.persistence.models import (
    Base,
    MintedAssetModel,
    SchemaVersionModel,
    SessionModel,
    UserModel,
)

__all__ = [
    "Database",
    "Base",
    "UserModel",
    "MintedAssetModel",
    "SessionModel",
    "SchemaVersionModel",
    "CURRENT_SCHEMA_VERSION",
    "MigrationReport",
    "SchemaMigrator",
    "prepare_schema",
]
