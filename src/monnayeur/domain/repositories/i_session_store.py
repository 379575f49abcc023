"""
Bridging session store interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from monnayeur.domain.entities.bridge_session import BridgeSession


class ISessionStore(ABC):
    """Interface for webapp bridging session persistence."""

    @abstractmethod
    async def create(self, chat_id: int, ttl_seconds: int = 3600) -> BridgeSession:
        """
        Create a session owned by a chat user.

        Args:
            chat_id: Owning chat-platform id
            ttl_seconds: Lifetime in seconds

        Returns:
            Created session
        """

    @abstractmethod
    async def resolve(self, token: str) -> Optional[BridgeSession]:
        """
        Get a live session.

        Args:
            token: Session token

        Returns:
            Session if it exists and has not expired, None otherwise
        """

    @abstractmethod
    async def attach_wallet(self, token: str, wallet_address: str) -> BridgeSession:
        """
        Record the wallet the webapp connected.

        Raises:
            SessionExpiredError: If the session is expired or unknown
        """

    @abstractmethod
    async def update_payload(self, token: str, payload: Any) -> BridgeSession:
        """
        Store free-form webapp data on a live session.

        Raises:
            SessionExpiredError: If the session is expired or unknown
        """

    @abstractmethod
    async def sweep(self) -> int:
        """
        Delete every expired session.

        Returns:
            Number of rows deleted
        """
