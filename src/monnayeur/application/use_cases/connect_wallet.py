"""
Connect wallet use case.

Handles the wallet-connected callback from the browser front end.
"""

from dataclasses import dataclass
from typing import Optional

from monnayeur.application.dto.mint_dto import CallbackResult, CallbackStatus
from monnayeur.domain.exceptions import EntityNotFoundError, SessionExpiredError
from monnayeur.domain.repositories.i_identity_store import IIdentityStore
from monnayeur.domain.repositories.i_session_store import ISessionStore
from monnayeur.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ConnectWalletCommand:
    """Command to record a connected wallet."""

    wallet_address: str
    session_id: Optional[str] = None
    social_id: Optional[int] = None
    display_name: Optional[str] = None


class ConnectWallet:
    """
    Use case for the wallet-connected callback.

    Identifies the user by session token (chat flow) or social id (social
    flow) and stores the wallet on both the user and the session.
    """

    def __init__(self, identity_store: IIdentityStore, session_store: ISessionStore):
        """
        Initialize use case.

        Args:
            identity_store: Identity store
            session_store: Session store
        """
        self.identity_store = identity_store
        self.session_store = session_store

    async def execute(self, command: ConnectWalletCommand) -> CallbackResult:
        """
        Record a connected wallet.

        Args:
            command: Command with wallet and session or social id

        Returns:
            CallbackResult (CONNECTED, SESSION_EXPIRED or UNKNOWN_USER)
        """
        if command.session_id:
            return await self._connect_via_session(command)

        if command.social_id is not None:
            internal_id = await self.identity_store.upsert_by_social_id(
                command.social_id,
                command.display_name or f"fc_{command.social_id}",
            )
            user = await self.identity_store.attach_wallet(
                internal_id, command.wallet_address
            )
            return CallbackResult(
                status=CallbackStatus.CONNECTED,
                message="Wallet connected",
                user=user,
            )

        user = await self.identity_store.resolve_by_wallet(command.wallet_address)
        if user is None:
            return CallbackResult(
                status=CallbackStatus.UNKNOWN_USER,
                message="No user is linked to this wallet",
            )

        return CallbackResult(
            status=CallbackStatus.CONNECTED,
            message="Wallet already connected",
            user=user,
        )

    async def _connect_via_session(self, command: ConnectWalletCommand) -> CallbackResult:
        session = await self.session_store.resolve(command.session_id)
        if session is None:
            return CallbackResult(
                status=CallbackStatus.SESSION_EXPIRED,
                message="Session expired or not found",
            )

        user = await self.identity_store.resolve_by_chat_id(session.owner_chat_id)
        if user is None:
            return CallbackResult(
                status=CallbackStatus.UNKNOWN_USER,
                message="Session owner is not registered",
            )

        try:
            await self.session_store.attach_wallet(
                command.session_id, command.wallet_address
            )
            user = await self.identity_store.attach_wallet(
                user.id, command.wallet_address
            )
        except SessionExpiredError:
            return CallbackResult(
                status=CallbackStatus.SESSION_EXPIRED,
                message="Session expired or not found",
            )
        except EntityNotFoundError:
            return CallbackResult(
                status=CallbackStatus.UNKNOWN_USER,
                message="Session owner is not registered",
            )

        logger.info(
            f"Wallet connected for chat user {session.owner_chat_id}",
            extra={"operation": "connect_wallet", "user_id": user.id},
        )

        return CallbackResult(
            status=CallbackStatus.CONNECTED,
            message="Wallet connected",
            user=user,
        )
