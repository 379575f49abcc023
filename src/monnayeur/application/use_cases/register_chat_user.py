"""
Register chat user use case.
"""

from typing import Optional

from monnayeur.domain.entities.user import User
from monnayeur.domain.repositories.i_identity_store import IIdentityStore


class RegisterChatUser:
    """Create or refresh a chat-platform user on first contact (/start)."""

    def __init__(self, identity_store: IIdentityStore):
        self.identity_store = identity_store

    async def execute(self, chat_id: int, display_name: Optional[str] = None) -> User:
        """
        Register user.

        Args:
            chat_id: Chat-platform id
            display_name: Latest display name

        Returns:
            Stored user entity
        """
        internal_id = await self.identity_store.upsert_by_chat_id(
            chat_id, display_name
        )
        return await self.identity_store.resolve_by_internal_id(internal_id)
