"""
Identity store interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from monnayeur.domain.entities.minted_asset import MintedAsset
from monnayeur.domain.entities.user import User
from monnayeur.domain.value_objects.platform import Platform


class IIdentityStore(ABC):
    """
    Interface for user and minted-asset persistence.

    The only component allowed to create or resolve User and MintedAsset
    rows. Lookups return None on a miss.
    """

    @abstractmethod
    async def upsert_by_chat_id(self, chat_id: int, display_name: Optional[str]) -> int:
        """
        Create or refresh a user keyed by chat-platform id.

        Args:
            chat_id: Chat-platform numeric id
            display_name: Latest display name

        Returns:
            Internal user id
        """

    @abstractmethod
    async def upsert_by_social_id(
        self, social_id: int, display_name: Optional[str]
    ) -> int:
        """
        Create or refresh a user keyed by social-platform id.

        Args:
            social_id: Social-platform numeric id
            display_name: Latest display name

        Returns:
            Internal user id
        """

    @abstractmethod
    async def resolve_by_chat_id(self, chat_id: int) -> Optional[User]:
        """Get user by chat-platform id."""

    @abstractmethod
    async def resolve_by_social_id(self, social_id: int) -> Optional[User]:
        """Get user by social-platform id."""

    @abstractmethod
    async def resolve_by_internal_id(self, internal_id: int) -> Optional[User]:
        """Get user by internal id."""

    @abstractmethod
    async def resolve_by_wallet(self, wallet_address: str) -> Optional[User]:
        """
        Get the most recently updated user holding a wallet address.

        Args:
            wallet_address: Wallet address

        Returns:
            User entity if found, None otherwise
        """

    @abstractmethod
    async def attach_wallet(self, internal_id: int, wallet_address: str) -> User:
        """
        Overwrite the user's wallet address.

        Args:
            internal_id: Internal user id
            wallet_address: Newly connected wallet

        Returns:
            Updated user entity

        Raises:
            EntityNotFoundError: If user not found
        """

    @abstractmethod
    async def record_mint(
        self,
        internal_id: int,
        token_id: int,
        wallet_address: str,
        metadata_locator: str,
        transaction_ref: str,
        block_height: Optional[int] = None,
        origin_platform: Platform = Platform.TELEGRAM,
    ) -> MintedAsset:
        """
        Append a minted asset and bump the owner's counters atomically.

        Must be the last write of its unit of work: a rejected write rolls
        back the whole session.

        Returns:
            Recorded asset

        Raises:
            EntityNotFoundError: If user not found
            ConstraintViolationError: If the engine rejects the write
        """

    @abstractmethod
    async def list_assets(self, internal_id: int) -> List[MintedAsset]:
        """List a user's assets, most recent mint first."""

    @abstractmethod
    async def count_assets(self, internal_id: int) -> int:
        """Count a user's asset rows."""

    @abstractmethod
    async def find_asset(
        self, token_id: int, transaction_ref: str
    ) -> Optional[MintedAsset]:
        """Get the asset recorded for a token id and transaction, if any."""
