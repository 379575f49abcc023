"""
Monnayeur Health Check implementation.

Liveness and readiness probes for the minting backend.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from sqlalchemy import text

from monnayeur.infrastructure.persistence.database import Database
from monnayeur.infrastructure.persistence.migrator import CURRENT_SCHEMA_VERSION


class HealthStatus(str, Enum):
    """Health status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class MonnayeurHealthCheck:
    """
    Health check for the Monnayeur service.

    Checks:
    - Database connectivity (SQLite file)
    - Schema version marker matches the running build
    """

    def __init__(self, database: Database, version: str = "0.1.0"):
        """
        Initialize health check.

        Args:
            database: Application database
            version: Reported service version
        """
        self.database = database
        self.version = version

    async def check_liveness(self) -> Dict[str, Any]:
        """
        Liveness probe - is the service alive?

        Returns basic service info without checking dependencies.
        """
        return {
            "status": HealthStatus.HEALTHY.value,
            "component": "monnayeur",
            "version": self.version,
            "timestamp": self._get_timestamp(),
        }

    async def check_readiness(self) -> Dict[str, Any]:
        """
        Readiness probe - is the service ready to handle requests?

        Returns:
            Dict with status and dependency checks
        """
        checks = {}
        overall_status = HealthStatus.HEALTHY

        db_status = await self._check_database()
        checks["database"] = db_status
        if db_status["status"] != HealthStatus.HEALTHY.value:
            overall_status = HealthStatus.UNHEALTHY
        else:
            schema_status = await self._check_schema()
            checks["schema"] = schema_status
            if schema_status["status"] != HealthStatus.HEALTHY.value:
                overall_status = HealthStatus.DEGRADED

        return {
            "status": overall_status.value,
            "component": "monnayeur",
            "version": self.version,
            "timestamp": self._get_timestamp(),
            "checks": checks,
        }

    async def _check_database(self) -> Dict[str, Any]:
        """Check SQLite connectivity."""
        if await self.database.health_check():
            return {
                "status": HealthStatus.HEALTHY.value,
                "message": "Database connected",
            }
        return {
            "status": HealthStatus.UNHEALTHY.value,
            "message": "Database connection failed",
        }

    async def _check_schema(self) -> Dict[str, Any]:
        """Check the schema version marker."""
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    text("SELECT version FROM schema_version LIMIT 1")
                )
                version = result.scalar_one_or_none() or 0
        except Exception as e:
            return {
                "status": HealthStatus.UNHEALTHY.value,
                "message": f"Schema version unreadable: {str(e)}",
                "error": str(e),
            }

        if version != CURRENT_SCHEMA_VERSION:
            return {
                "status": HealthStatus.DEGRADED.value,
                "message": f"Schema at version {version}, "
                f"expected {CURRENT_SCHEMA_VERSION}",
                "version": version,
            }

        return {
            "status": HealthStatus.HEALTHY.value,
            "message": "Schema up to date",
            "version": version,
        }

    def _get_timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat()
