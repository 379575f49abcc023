"""
Bridging session store implementation using SQLAlchemy.
"""

import json
from datetime import timedelta
from typing import Any, Callable, Optional
from uuid import uuid4

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from monnayeur.domain.entities.bridge_session import BridgeSession
from monnayeur.domain.exceptions import SessionExpiredError
from monnayeur.domain.repositories.i_session_store import ISessionStore
from monnayeur.infrastructure.monitoring.logger import get_logger
from monnayeur.infrastructure.persistence.models import SessionModel
from monnayeur.utils.clock import Clock, utc_now

logger = get_logger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 3600


def new_session_token() -> str:
    """Generate an opaque random session token."""
    return str(uuid4())


class SessionStore(ISessionStore):
    """
    SQLAlchemy implementation of the bridging session store.

    Expiry is checked on every read; expired rows stay inert in the table
    until the sweep deletes them.
    """

    def __init__(
        self,
        session: AsyncSession,
        now_fn: Clock = utc_now,
        token_factory: Callable[[], str] = new_session_token,
    ):
        """
        Initialize store with database session.

        Args:
            session: SQLAlchemy async session
            now_fn: Clock used for expiry checks and timestamps
            token_factory: Generator for new session tokens
        """
        self.session = session
        self.now_fn = now_fn
        self.token_factory = token_factory

    async def create(
        self, chat_id: int, ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    ) -> BridgeSession:
        """
        Create a session owned by a chat user.

        A token that already exists is taken over: owner and expiry are
        replaced and any attached wallet or payload is cleared.
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        now = self.now_fn()
        token = self.token_factory()
        expires_at = now + timedelta(seconds=ttl_seconds)

        stmt = sqlite_insert(SessionModel).values(
            id=token,
            telegram_id=chat_id,
            expires_at=expires_at,
            created_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[SessionModel.id],
            set_={
                "telegram_id": stmt.excluded.telegram_id,
                "expires_at": stmt.excluded.expires_at,
                "created_at": stmt.excluded.created_at,
                "wallet_address": None,
                "data": None,
            },
        )
        await self.session.execute(stmt)

        logger.debug(
            f"Session created for chat user {chat_id}",
            extra={"operation": "create_session", "user_id": chat_id},
        )

        return BridgeSession(
            token=token,
            owner_chat_id=chat_id,
            expires_at=expires_at,
            created_at=now,
        )

    async def resolve(self, token: str) -> Optional[BridgeSession]:
        """
        Get a live session by token.

        Args:
            token: Opaque session token

        Returns:
            BridgeSession if it exists and has not expired, None otherwise
        """
        stmt = (
            select(SessionModel)
            .where(
                SessionModel.id == token,
                SessionModel.expires_at > self.now_fn(),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def attach_wallet(self, token: str, wallet_address: str) -> BridgeSession:
        """
        Record the wallet the webapp connected.

        Replaying a live session overwrites the previous wallet.

        Raises:
            SessionExpiredError: If the session is expired or unknown
        """
        return await self._update_live(token, wallet_address=wallet_address)

    async def update_payload(self, token: str, payload: Any) -> BridgeSession:
        """
        Store free-form webapp data on a live session.

        Raises:
            SessionExpiredError: If the session is expired or unknown
        """
        data = json.dumps(payload) if payload is not None else None
        return await self._update_live(token, data=data)

    async def sweep(self) -> int:
        """
        Delete every session whose expiry has passed.

        Returns:
            Number of rows removed
        """
        result = await self.session.execute(
            delete(SessionModel)
            .where(SessionModel.expires_at <= self.now_fn())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def _update_live(self, token: str, **values) -> BridgeSession:
        result = await self.session.execute(
            update(SessionModel)
            .where(
                SessionModel.id == token,
                SessionModel.expires_at > self.now_fn(),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise SessionExpiredError(token)

        session = await self.resolve(token)
        if session is None:
            raise SessionExpiredError(token)
        return session

    def _to_entity(self, model: SessionModel) -> BridgeSession:
        """Convert ORM model to domain entity."""
        return BridgeSession(
            token=model.id,
            owner_chat_id=model.telegram_id,
            wallet_address=model.wallet_address,
            payload=json.loads(model.data) if model.data else None,
            expires_at=model.expires_at,
            created_at=model.created_at or model.expires_at,
        )
