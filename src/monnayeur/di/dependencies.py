"""
FastAPI dependency injection.

Provides dependencies for FastAPI routes using the DI container. Each
request gets one database session, i.e. one unit of work.
"""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from monnayeur.application.use_cases.confirm_mint import ConfirmMint
from monnayeur.application.use_cases.connect_wallet import ConnectWallet
from monnayeur.application.use_cases.get_user_collection import (
    GetUserCollection,
)
from monnayeur.application.use_cases.start_mint_flow import StartMintFlow
from monnayeur.di.container import get_container
from monnayeur.infrastructure.monitoring.health_check import MonnayeurHealthCheck

# ================================================================
# Database Dependencies
# ================================================================


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session dependency.

    Commits after the request handler returns, rolls back if it raises.
    """
    container = get_container()
    async with container.database.session() as session:
        yield session


# ================================================================
# Service Dependencies
# ================================================================


def get_health_check() -> MonnayeurHealthCheck:
    """Get health check dependency."""
    return get_container().health_check


# ================================================================
# Use Case Dependencies
# ================================================================


def get_start_mint_flow(
    session: AsyncSession = Depends(get_db_session),
) -> StartMintFlow:
    """Get StartMintFlow use case dependency."""
    return get_container().get_start_mint_flow(session)


def get_connect_wallet(
    session: AsyncSession = Depends(get_db_session),
) -> ConnectWallet:
    """Get ConnectWallet use case dependency."""
    return get_container().get_connect_wallet(session)


def get_confirm_mint(
    session: AsyncSession = Depends(get_db_session),
) -> ConfirmMint:
    """Get ConfirmMint use case dependency."""
    return get_container().get_confirm_mint(session)


def get_get_user_collection(
    session: AsyncSession = Depends(get_db_session),
) -> GetUserCollection:
    """Get GetUserCollection use case dependency."""
    return get_container().get_get_user_collection(session)
