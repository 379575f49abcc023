"""
Integration tests for SchemaMigrator.

Lays down each historical store shape in a real SQLite file, runs the
startup migration and checks the resulting shape and data.

Usage:
    pytest tests/integration/persistence/test_migrator.py
"""

import pytest
from sqlalchemy import text

from monnayeur.domain.exceptions import MigrationDegradedError
from monnayeur.domain.value_objects.platform import Platform
from monnayeur.infrastructure.persistence import migrator as migrator_module
from monnayeur.infrastructure.persistence.migrator import (
    CURRENT_SCHEMA_VERSION,
    SchemaMigrator,
    prepare_schema,
)
from monnayeur.infrastructure.persistence.repositories.identity_store import (
    IdentityStore,
)

pytestmark = pytest.mark.integration

LEGACY_SCHEMA = [
    """
    CREATE TABLE users (
        telegram_id INTEGER PRIMARY KEY,
        username TEXT,
        wallet_address TEXT,
        nfts_minted INTEGER DEFAULT 0,
        total_spent REAL DEFAULT 0,
        last_mint_at INTEGER,
        created_at INTEGER DEFAULT (strftime('%s', 'now')),
        updated_at INTEGER DEFAULT (strftime('%s', 'now'))
    )
    """,
    """
    CREATE TABLE nfts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        token_id INTEGER NOT NULL,
        owner_telegram_id INTEGER NOT NULL,
        owner_wallet_address TEXT NOT NULL,
        metadata_uri TEXT NOT NULL,
        transaction_hash TEXT NOT NULL,
        block_number INTEGER,
        minted_at INTEGER DEFAULT (strftime('%s', 'now')),
        FOREIGN KEY (owner_telegram_id) REFERENCES users (telegram_id)
    )
    """,
    """
    CREATE TABLE sessions (
        id TEXT PRIMARY KEY,
        telegram_id INTEGER NOT NULL,
        wallet_address TEXT,
        data TEXT,
        expires_at INTEGER NOT NULL,
        created_at INTEGER DEFAULT (strftime('%s', 'now')),
        FOREIGN KEY (telegram_id) REFERENCES users (telegram_id)
    )
    """,
    "CREATE INDEX idx_nfts_owner ON nfts(owner_telegram_id)",
    "CREATE INDEX idx_sessions_expires ON sessions(expires_at)",
    "INSERT INTO users (telegram_id, username, nfts_minted, last_mint_at) "
    "VALUES (111, 'alice', 1, 1700000000)",
    "INSERT INTO nfts (token_id, owner_telegram_id, owner_wallet_address, "
    "metadata_uri, transaction_hash) VALUES (1, 111, '0xABC', 'ipfs://1', '0xtx1')",
    "INSERT INTO sessions (id, telegram_id, expires_at) "
    "VALUES ('old-token', 111, 1700003600)",
]

PARTIAL_SCHEMA = [
    """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        telegram_id INTEGER,
        username TEXT,
        wallet_address TEXT,
        nfts_minted INTEGER DEFAULT 0,
        last_mint_at INTEGER,
        created_at INTEGER DEFAULT (strftime('%s', 'now')),
        updated_at INTEGER DEFAULT (strftime('%s', 'now'))
    )
    """,
    """
    CREATE TABLE nfts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        token_id INTEGER NOT NULL,
        owner_user_id INTEGER NOT NULL,
        owner_wallet_address TEXT NOT NULL,
        metadata_uri TEXT NOT NULL,
        transaction_hash TEXT NOT NULL,
        block_number INTEGER,
        minted_at INTEGER DEFAULT (strftime('%s', 'now')),
        FOREIGN KEY (owner_user_id) REFERENCES users (id)
    )
    """,
    "INSERT INTO users (telegram_id, username, wallet_address, nfts_minted, "
    "last_mint_at, created_at, updated_at) "
    "VALUES (111, 'alice', '0xABC', 1, 1700000000, 1699990000, 1700000000)",
    "INSERT INTO nfts (token_id, owner_user_id, owner_wallet_address, "
    "metadata_uri, transaction_hash, minted_at) "
    "VALUES (1, 1, '0xABC', 'ipfs://1', '0xtx1', 1700000000)",
]


async def _execute_all(database, statements) -> None:
    async with database.engine.begin() as conn:
        for statement in statements:
            await conn.execute(text(statement))


async def _columns(database, table: str) -> set:
    async with database.engine.connect() as conn:
        result = await conn.execute(text(f"PRAGMA table_info({table})"))
        return {row[1] for row in result}


async def _tables(database) -> set:
    async with database.engine.connect() as conn:
        result = await conn.execute(
            text("SELECT name FROM sqlite_master WHERE type = 'table'")
        )
        return {row[0] for row in result}


async def _schema_sql(database) -> list:
    async with database.engine.connect() as conn:
        result = await conn.execute(
            text("SELECT type, name, sql FROM sqlite_master ORDER BY type, name")
        )
        return [tuple(row) for row in result]


async def _count(database, table: str) -> int:
    async with database.engine.connect() as conn:
        result = await conn.execute(text(f"SELECT COUNT(*) FROM {table}"))
        return result.scalar_one()


class TestSchemaMigrator:
    """Integration tests for SchemaMigrator."""

    # ================================================================
    # Fresh store
    # ================================================================

    async def test_fresh_database(self, raw_database):
        """Test an empty file ends up at the current shape and version."""
        report = await prepare_schema(raw_database)

        # Assertions
        assert report.from_version == 0
        assert report.to_version == CURRENT_SCHEMA_VERSION
        assert report.applied_steps == []
        assert report.degraded is False
        assert {"users", "nfts", "sessions", "schema_version"} <= await _tables(
            raw_database
        )
        assert await SchemaMigrator(raw_database.engine).current_version() == 1

    async def test_current_version_unmarked(self, raw_database):
        """Test a store without a marker reports version 0."""
        migrator = SchemaMigrator(raw_database.engine)

        assert await migrator.current_version() == 0

        await migrator.stamp_version(1)
        await migrator.stamp_version(1)

        assert await migrator.current_version() == 1
        assert await _count(raw_database, "schema_version") == 1

    # ================================================================
    # Legacy store (chat id as primary key)
    # ================================================================

    async def test_legacy_store_backed_up_and_rebuilt(self, raw_database):
        """Test legacy tables are preserved under backup names."""
        await _execute_all(raw_database, LEGACY_SCHEMA)

        report = await prepare_schema(raw_database)

        # Assertions
        assert report.degraded is False
        assert report.applied_steps == [
            "sessions_drop_legacy_fk",
            "nfts_backup_legacy",
            "users_backup_legacy",
        ]
        assert sorted(report.backups) == [
            "nfts_backup",
            "sessions_backup",
            "users_backup",
        ]

        tables = await _tables(raw_database)
        assert {"users_backup", "nfts_backup", "sessions_backup"} <= tables
        assert "id" in await _columns(raw_database, "users")
        assert "farcaster_fid" in await _columns(raw_database, "users")
        assert "owner_user_id" in await _columns(raw_database, "nfts")

        # Old rows live only in the backups
        assert await _count(raw_database, "users_backup") == 1
        assert await _count(raw_database, "nfts_backup") == 1
        assert await _count(raw_database, "sessions_backup") == 1
        assert await _count(raw_database, "users") == 0

    async def test_existing_backup_never_overwritten(self, raw_database):
        """Test a second legacy migration picks a fresh backup name."""
        await _execute_all(
            raw_database,
            [
                "CREATE TABLE users_backup (marker TEXT)",
                "INSERT INTO users_backup VALUES ('keep me')",
            ]
            + LEGACY_SCHEMA,
        )

        report = await prepare_schema(raw_database)

        assert "users_backup_2" in report.backups
        async with raw_database.engine.connect() as conn:
            result = await conn.execute(text("SELECT marker FROM users_backup"))
            assert result.scalar_one() == "keep me"
        assert await _count(raw_database, "users_backup_2") == 1

    async def test_legacy_store_usable_after_migration(self, raw_database, clock):
        """Test the rebuilt store accepts new users and mints."""
        await _execute_all(raw_database, LEGACY_SCHEMA)
        await prepare_schema(raw_database)

        async with raw_database.session() as session:
            store = IdentityStore(session, now_fn=clock)
            user_id = await store.upsert_by_chat_id(111, "alice")
            await store.record_mint(user_id, 2, "0xABC", "ipfs://2", "0xtx2")
            user = await store.resolve_by_chat_id(111)

        assert user.minted_count == 1

    # ================================================================
    # Partial v1 store (missing social-platform columns)
    # ================================================================

    async def test_partial_store_columns_added(self, raw_database, clock):
        """Test missing columns are added and rows preserved."""
        await _execute_all(raw_database, PARTIAL_SCHEMA)

        report = await prepare_schema(raw_database)

        # Assertions
        assert report.degraded is False
        assert report.applied_steps == [
            "users_add_farcaster_fid",
            "users_add_platform",
            "nfts_add_platform",
        ]
        assert report.backups == []
        assert {"farcaster_fid", "platform"} <= await _columns(raw_database, "users")
        assert "platform" in await _columns(raw_database, "nfts")

        async with raw_database.session() as session:
            store = IdentityStore(session, now_fn=clock)
            user = await store.resolve_by_chat_id(111)
            assets = await store.list_assets(user.id)

        assert user.display_name == "alice"
        assert user.wallet_address == "0xABC"
        assert user.minted_count == 1
        assert user.platform == Platform.TELEGRAM
        assert user.last_mint_at is not None
        assert [a.token_id for a in assets] == [1]
        assert assets[0].origin_platform == Platform.TELEGRAM

    async def test_partial_store_social_upsert(self, raw_database, clock):
        """Test the added social id column is unique-indexed for upserts."""
        await _execute_all(raw_database, PARTIAL_SCHEMA)
        await prepare_schema(raw_database)

        async with raw_database.session() as session:
            store = IdentityStore(session, now_fn=clock)
            first = await store.upsert_by_social_id(4242, "fc_4242")
            second = await store.upsert_by_social_id(4242, "renamed")

        assert first == second

    async def test_partial_store_gains_mint_unique_index(self, raw_database):
        """Test older nfts tables get the (token, transaction) index."""
        await _execute_all(raw_database, PARTIAL_SCHEMA)

        report = await prepare_schema(raw_database)

        names = {name for _, name, _ in await _schema_sql(raw_database)}
        assert report.errors == []
        assert {"idx_nfts_token_id", "idx_nfts_token_tx_unique"} <= names

    async def test_partial_nfts_rebuilt_when_owner_column_missing(self, raw_database):
        """Test an nfts table still keyed by chat id is backed up."""
        statements = list(PARTIAL_SCHEMA[:1]) + [
            """
            CREATE TABLE nfts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                token_id INTEGER NOT NULL,
                owner_telegram_id INTEGER NOT NULL,
                owner_wallet_address TEXT NOT NULL,
                metadata_uri TEXT NOT NULL,
                transaction_hash TEXT NOT NULL
            )
            """,
        ]
        await _execute_all(raw_database, statements)

        report = await prepare_schema(raw_database)

        assert "nfts_backup_legacy" in report.applied_steps
        assert report.backups == ["nfts_backup"]
        assert "owner_user_id" in await _columns(raw_database, "nfts")

    # ================================================================
    # Idempotence and failures
    # ================================================================

    async def test_second_run_is_noop(self, raw_database):
        """Test migrating an up-to-date store changes nothing."""
        await _execute_all(raw_database, LEGACY_SCHEMA)
        await prepare_schema(raw_database)

        schema_before = await _schema_sql(raw_database)
        counts_before = {
            table: await _count(raw_database, table)
            for table in await _tables(raw_database)
        }

        report = await prepare_schema(raw_database)

        # Assertions
        assert report.changed is False
        assert report.degraded is False
        assert await _schema_sql(raw_database) == schema_before
        counts_after = {
            table: await _count(raw_database, table)
            for table in await _tables(raw_database)
        }
        assert counts_after == counts_before

    async def test_failed_step_recorded_and_startup_continues(
        self, raw_database, monkeypatch
    ):
        """Test a failed step degrades the report instead of aborting."""
        await _execute_all(raw_database, PARTIAL_SCHEMA)

        def broken_step(op):
            raise RuntimeError("disk said no")

        monkeypatch.setattr(migrator_module, "_add_farcaster_fid", broken_step)

        report = await prepare_schema(raw_database)

        assert report.degraded is True
        assert report.errors[0].step == "users_add_farcaster_fid"
        assert "users_add_platform" in report.applied_steps
        assert await SchemaMigrator(raw_database.engine).current_version() == 1

    async def test_failed_step_strict(self, raw_database, monkeypatch):
        """Test strict mode raises the failed step."""
        await _execute_all(raw_database, PARTIAL_SCHEMA)

        def broken_step(op):
            raise RuntimeError("disk said no")

        monkeypatch.setattr(migrator_module, "_add_farcaster_fid", broken_step)

        with pytest.raises(MigrationDegradedError) as exc_info:
            await SchemaMigrator(raw_database.engine).migrate(strict=True)

        assert exc_info.value.step == "users_add_farcaster_fid"
