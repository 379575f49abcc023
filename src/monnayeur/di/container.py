"""
Dependency Injection Container for Monnayeur.

Manages service instances and their dependencies.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from monnayeur.application.use_cases.confirm_mint import ConfirmMint
from monnayeur.application.use_cases.connect_wallet import ConnectWallet
from monnayeur.application.use_cases.get_user_collection import (
    GetUserCollection,
)
from monnayeur.application.use_cases.register_chat_user import RegisterChatUser
from monnayeur.application.use_cases.start_mint_flow import StartMintFlow
from monnayeur.config.settings import Settings, get_settings
from monnayeur.domain.repositories.i_identity_store import IIdentityStore
from monnayeur.domain.repositories.i_session_store import ISessionStore
from monnayeur.domain.services.eligibility_policy import MintEligibilityPolicy
from monnayeur.infrastructure.monitoring.health_check import MonnayeurHealthCheck
from monnayeur.infrastructure.monitoring.logger import get_logger
from monnayeur.infrastructure.persistence.database import Database
from monnayeur.infrastructure.persistence.migrator import (
    MigrationReport,
    prepare_schema,
)
from monnayeur.infrastructure.persistence.repositories.identity_store import (
    IdentityStore,
)
from monnayeur.infrastructure.persistence.repositories.session_store import (
    SessionStore,
)
from monnayeur.infrastructure.scheduling.session_sweeper import SessionSweeper
from monnayeur.utils.clock import Clock, utc_now

logger = get_logger(__name__)


class DIContainer:
    """
    Dependency Injection Container.

    Holds process-wide singletons (database, policy, sweeper). Stores and
    use cases are session-scoped and built per unit of work.
    """

    def __init__(self, settings: Optional[Settings] = None, now_fn: Clock = utc_now):
        """
        Initialize container with None instances.

        Args:
            settings: Settings to use instead of the global ones
            now_fn: Clock shared by every store and use case
        """
        self._settings = settings
        self.now_fn = now_fn

        # Infrastructure
        self._database: Optional[Database] = None
        self._session_sweeper: Optional[SessionSweeper] = None
        self._health_check: Optional[MonnayeurHealthCheck] = None

        # Domain Services
        self._eligibility_policy: Optional[MintEligibilityPolicy] = None

        self.migration_report: Optional[MigrationReport] = None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    async def initialize(self) -> None:
        """Connect, bring the schema up to date, start background tasks."""
        await self.database.connect()

        # Must finish before any other query
        self.migration_report = await prepare_schema(self.database)

        if self.settings.SESSION_SWEEP_ENABLED:
            self.session_sweeper.start()

    async def shutdown(self) -> None:
        """Stop background tasks and close connections."""
        if self._session_sweeper:
            await self._session_sweeper.stop()

        if self._database:
            await self._database.disconnect()

    # Infrastructure Getters

    @property
    def database(self) -> Database:
        """Get database instance."""
        if self._database is None:
            self._database = Database(
                database_url=self.settings.DATABASE_URL,
                echo=self.settings.DATABASE_ECHO,
            )
        return self._database

    @property
    def session_sweeper(self) -> SessionSweeper:
        """Get expired-session sweeper."""
        if self._session_sweeper is None:
            self._session_sweeper = SessionSweeper(
                database=self.database,
                interval_seconds=self.settings.SESSION_SWEEP_INTERVAL_SECONDS,
                now_fn=self.now_fn,
            )
        return self._session_sweeper

    @property
    def health_check(self) -> MonnayeurHealthCheck:
        """Get health check instance."""
        if self._health_check is None:
            self._health_check = MonnayeurHealthCheck(
                database=self.database,
                version=self.settings.APP_VERSION,
            )
        return self._health_check

    # Domain Service Getters

    @property
    def eligibility_policy(self) -> MintEligibilityPolicy:
        """Get mint eligibility policy."""
        if self._eligibility_policy is None:
            self._eligibility_policy = MintEligibilityPolicy(
                max_mints=self.settings.MAX_MINTS_PER_USER,
                cooldown_seconds=self.settings.MINT_COOLDOWN_SECONDS,
            )
        return self._eligibility_policy

    # Repository Getters (Session-scoped)

    def get_identity_store(self, session: AsyncSession) -> IIdentityStore:
        """Get identity store bound to a session."""
        return IdentityStore(session, now_fn=self.now_fn)

    def get_session_store(self, session: AsyncSession) -> ISessionStore:
        """Get session store bound to a session."""
        return SessionStore(session, now_fn=self.now_fn)

    # Use Case Getters

    def get_start_mint_flow(self, session: AsyncSession) -> StartMintFlow:
        """
        Get start mint flow use case with session-scoped stores.

        Args:
            session: Active database session

        Returns:
            StartMintFlow use case instance
        """
        return StartMintFlow(
            identity_store=self.get_identity_store(session),
            session_store=self.get_session_store(session),
            policy=self.eligibility_policy,
            webapp_url=self.settings.WEBAPP_URL,
            session_ttl_seconds=self.settings.SESSION_TTL_SECONDS,
            now_fn=self.now_fn,
        )

    def get_register_chat_user(self, session: AsyncSession) -> RegisterChatUser:
        """Get register chat user use case."""
        return RegisterChatUser(identity_store=self.get_identity_store(session))

    def get_connect_wallet(self, session: AsyncSession) -> ConnectWallet:
        """Get connect wallet use case."""
        return ConnectWallet(
            identity_store=self.get_identity_store(session),
            session_store=self.get_session_store(session),
        )

    def get_confirm_mint(self, session: AsyncSession) -> ConfirmMint:
        """Get confirm mint use case."""
        return ConfirmMint(
            identity_store=self.get_identity_store(session),
            session_store=self.get_session_store(session),
        )

    def get_get_user_collection(self, session: AsyncSession) -> GetUserCollection:
        """Get user collection use case."""
        return GetUserCollection(identity_store=self.get_identity_store(session))


# Global container instance
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """Get global DI container instance."""
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


async def initialize_container(
    settings: Optional[Settings] = None,
    now_fn: Optional[Clock] = None,
) -> DIContainer:
    """
    Initialize and return DI container.

    Passing settings or a clock replaces the global container.
    """
    global _container
    if settings is not None or now_fn is not None:
        _container = DIContainer(settings=settings, now_fn=now_fn or utc_now)

    container = get_container()
    await container.initialize()
    return container


async def shutdown_container() -> None:
    """Shutdown DI container."""
    global _container
    if _container is None:
        return

    await _container.shutdown()
    _container = None
