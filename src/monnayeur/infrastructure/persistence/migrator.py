"""
Schema migrator.

Brings an existing store from any earlier shape to the current one before
anything else queries it. The live table shape is inspected on every run;
the version marker alone is not trusted, since older builds populated
stores without ever writing one.

Structural breaks are handled by copying the table to a backup name,
dropping it and letting declarative creation rebuild it. Backed-up rows are
not copied back into the new tables; restoring them is a manual operation.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

import sqlalchemy as sa
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from monnayeur.domain.exceptions import MigrationDegradedError
from monnayeur.infrastructure.monitoring import metrics
from monnayeur.infrastructure.monitoring.logger import get_logger
from monnayeur.infrastructure.persistence.database import Database
from monnayeur.infrastructure.persistence.models import Base

logger = get_logger(__name__)

CURRENT_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class StepResult:
    """Outcome of one migration step that did not fail."""

    applied: bool
    backup: Optional[str] = None


SKIPPED = StepResult(applied=False)
APPLIED = StepResult(applied=True)

StepAction = Callable[[Operations], StepResult]


@dataclass
class MigrationReport:
    """What a migration run did."""

    from_version: int
    to_version: int
    applied_steps: List[str] = field(default_factory=list)
    backups: List[str] = field(default_factory=list)
    errors: List[MigrationDegradedError] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """Whether any step failed."""
        return bool(self.errors)

    @property
    def changed(self) -> bool:
        """Whether any structural change was made."""
        return bool(self.applied_steps)


class SchemaMigrator:
    """
    Detects the on-disk shape and transforms it into the current shape.

    Every step is a presence test followed by an additive change or a
    backup-then-drop, so running the migrator twice is a no-op the second
    time.
    """

    def __init__(self, engine: AsyncEngine):
        """
        Initialize migrator.

        Args:
            engine: Connected async engine
        """
        self.engine = engine

    async def current_version(self) -> int:
        """
        Read the applied migration level.

        Returns:
            Version number, 0 for a fresh or unmarked store
        """
        async with self.engine.begin() as conn:
            await conn.execute(
                sa.text(
                    "CREATE TABLE IF NOT EXISTS schema_version "
                    "(version INTEGER PRIMARY KEY)"
                )
            )
            result = await conn.execute(
                sa.text("SELECT version FROM schema_version LIMIT 1")
            )
            version = result.scalar_one_or_none()

        return version or 0

    async def stamp_version(self, version: int) -> None:
        """Replace the version marker."""
        async with self.engine.begin() as conn:
            await conn.execute(sa.text("DELETE FROM schema_version"))
            await conn.execute(
                sa.text("INSERT INTO schema_version (version) VALUES (:version)"),
                {"version": version},
            )

    async def migrate(
        self,
        target_version: int = CURRENT_SCHEMA_VERSION,
        strict: bool = False,
    ) -> MigrationReport:
        """
        Bring the store to the target shape.

        Failed steps are logged and recorded in the report; the run carries
        on so that table creation can still leave a usable store.

        Args:
            target_version: Version the store should end up at
            strict: Raise the first failed step instead of recording it

        Returns:
            MigrationReport

        Raises:
            MigrationDegradedError: If a step fails and strict is set
        """
        from_version = await self.current_version()
        report = MigrationReport(from_version=from_version, to_version=target_version)

        logger.info(
            f"Current schema version: {from_version}, target: {target_version}"
        )

        if target_version >= 1:
            await self._migrate_to_v1(report, strict)

        if report.degraded:
            logger.error(
                f"Schema migration degraded: {len(report.errors)} step(s) failed"
            )
        elif report.changed:
            logger.info(f"Schema migrated: {', '.join(report.applied_steps)}")
        else:
            logger.info("Database schema is up to date")

        return report

    # ================================================================
    # v1: internal user id + social-platform identity
    # ================================================================

    async def _migrate_to_v1(self, report: MigrationReport, strict: bool) -> None:
        """Run every v1 check in dependency order."""
        # Sessions first: a legacy foreign key into users blocks dropping it
        await self._run_step(
            report, strict, "sessions_drop_legacy_fk", _detach_sessions
        )

        users_columns = await self._table_columns("users")
        if not users_columns:
            logger.info("No existing users table. Fresh database.")
            return

        if "id" not in users_columns:
            logger.info("Legacy users shape detected (chat id as primary key)")
            await self._run_step(
                report, strict, "nfts_backup_legacy", _backup_step("nfts")
            )
            await self._run_step(
                report, strict, "users_backup_legacy", _backup_step("users")
            )
            return

        if "farcaster_fid" not in users_columns:
            await self._run_step(
                report, strict, "users_add_farcaster_fid", _add_farcaster_fid
            )
        if "platform" not in users_columns:
            await self._run_step(
                report, strict, "users_add_platform", _add_platform_column("users")
            )

        nfts_columns = await self._table_columns("nfts")
        if not nfts_columns:
            return

        if "owner_user_id" not in nfts_columns:
            await self._run_step(
                report, strict, "nfts_backup_legacy", _backup_step("nfts")
            )
        elif "platform" not in nfts_columns:
            await self._run_step(
                report, strict, "nfts_add_platform", _add_platform_column("nfts")
            )

    async def _run_step(
        self,
        report: MigrationReport,
        strict: bool,
        step: str,
        action: StepAction,
    ) -> None:
        try:
            async with self.engine.begin() as conn:
                outcome = await conn.run_sync(_apply, action)
        except Exception as e:
            error = MigrationDegradedError(step, str(e))
            metrics.migration_steps_total.labels(step=step, outcome="failed").inc()
            logger.error(
                f"Migration step {step} failed: {e}",
                exc_info=True,
                extra={"step": step},
            )
            if strict:
                raise error from e
            report.errors.append(error)
            return

        if not outcome.applied:
            return

        report.applied_steps.append(step)
        if outcome.backup:
            report.backups.append(outcome.backup)
        metrics.migration_steps_total.labels(step=step, outcome="applied").inc()
        logger.info(f"Migration step applied: {step}", extra={"step": step})

    async def _table_columns(self, table: str) -> Set[str]:
        """Column names of ``table``, empty if it does not exist."""
        async with self.engine.connect() as conn:
            return await conn.run_sync(_table_columns, table)


# ================================================================
# Steps (run against a sync connection)
# ================================================================


def _apply(sync_conn: Connection, action: StepAction) -> StepResult:
    context = MigrationContext.configure(sync_conn)
    return action(Operations(context))


def _table_columns(sync_conn: Connection, table: str) -> Set[str]:
    inspector = sa.inspect(sync_conn)
    if not inspector.has_table(table):
        return set()
    return {column["name"] for column in inspector.get_columns(table)}


def _detach_sessions(op: Operations) -> StepResult:
    inspector = sa.inspect(op.get_bind())
    if not inspector.has_table("sessions"):
        return SKIPPED

    foreign_keys = inspector.get_foreign_keys("sessions")
    if not any(fk["referred_table"] == "users" for fk in foreign_keys):
        return SKIPPED

    return StepResult(applied=True, backup=_backup_and_drop(op, "sessions"))


def _add_farcaster_fid(op: Operations) -> StepResult:
    op.add_column("users", sa.Column("farcaster_fid", sa.Integer(), nullable=True))
    op.create_index(
        "idx_users_farcaster_unique",
        "users",
        ["farcaster_fid"],
        unique=True,
        sqlite_where=sa.text("farcaster_fid IS NOT NULL"),
    )
    return APPLIED


def _add_platform_column(table: str) -> StepAction:
    def action(op: Operations) -> StepResult:
        op.add_column(
            table,
            sa.Column(
                "platform",
                sa.Text(),
                nullable=False,
                server_default="telegram",
            ),
        )
        return APPLIED

    return action


def _backup_step(table: str) -> StepAction:
    def action(op: Operations) -> StepResult:
        if not sa.inspect(op.get_bind()).has_table(table):
            return SKIPPED
        return StepResult(applied=True, backup=_backup_and_drop(op, table))

    return action


def _backup_and_drop(op: Operations, table: str) -> str:
    """Copy ``table`` under a free backup name, then drop it."""
    existing = set(sa.inspect(op.get_bind()).get_table_names())
    backup = f"{table}_backup"
    suffix = 2
    while backup in existing:
        backup = f"{table}_backup_{suffix}"
        suffix += 1

    op.execute(f"CREATE TABLE {backup} AS SELECT * FROM {table}")
    op.drop_table(table)
    logger.info(f"Table {table} backed up to {backup} and dropped")
    return backup


# ================================================================
# Startup entry point
# ================================================================


async def ensure_indexes(engine: AsyncEngine) -> None:
    """Create declared indexes missing on tables that pre-date them."""

    def _create(sync_conn: Connection) -> None:
        for table in Base.metadata.sorted_tables:
            for index in table.indexes:
                index.create(sync_conn, checkfirst=True)

    async with engine.begin() as conn:
        await conn.run_sync(_create)


async def prepare_schema(
    database: Database,
    target_version: int = CURRENT_SCHEMA_VERSION,
    strict: bool = False,
) -> MigrationReport:
    """
    Migrate, create missing tables and stamp the version marker.

    Must complete before any other component issues a query.

    Args:
        database: Connected database
        target_version: Schema version to reach
        strict: Raise on the first failed migration step

    Returns:
        MigrationReport of the migration phase
    """
    migrator = SchemaMigrator(database.engine)
    report = await migrator.migrate(target_version, strict=strict)

    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        await ensure_indexes(database.engine)
    except Exception as e:
        error = MigrationDegradedError("ensure_indexes", str(e))
        logger.error(f"Index creation failed: {e}", exc_info=True)
        if strict:
            raise error from e
        report.errors.append(error)

    await migrator.stamp_version(target_version)
    logger.info(f"Schema ready at version {target_version}")

    return report
