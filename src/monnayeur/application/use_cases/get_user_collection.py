"""
Get user collection use case.

Serves /collection in the chat client and the stats endpoint.
"""

from dataclasses import dataclass
from typing import Optional

from monnayeur.application.dto.mint_dto import CollectionSummary
from monnayeur.domain.exceptions import ValidationError
from monnayeur.domain.repositories.i_identity_store import IIdentityStore


@dataclass
class GetUserCollectionQuery:
    """Lookup by any one of the user's identifiers."""

    chat_id: Optional[int] = None
    social_id: Optional[int] = None
    wallet_address: Optional[str] = None


class GetUserCollection:
    """Use case for reading a user's minted assets."""

    def __init__(self, identity_store: IIdentityStore):
        self.identity_store = identity_store

    async def execute(self, query: GetUserCollectionQuery) -> CollectionSummary:
        """
        Read a user's collection.

        Unknown users get an empty summary rather than an error.

        Raises:
            ValidationError: If the query carries no identifier
        """
        if query.chat_id is not None:
            user = await self.identity_store.resolve_by_chat_id(query.chat_id)
        elif query.social_id is not None:
            user = await self.identity_store.resolve_by_social_id(query.social_id)
        elif query.wallet_address:
            user = await self.identity_store.resolve_by_wallet(query.wallet_address)
        else:
            raise ValidationError(
                "query", "one of chat id, social id or wallet address is required"
            )

        if user is None:
            return CollectionSummary(user=None)

        assets = await self.identity_store.list_assets(user.id)
        asset_count = await self.identity_store.count_assets(user.id)

        return CollectionSummary(
            user=user,
            minted_count=user.minted_count,
            asset_count=asset_count,
            assets=assets,
        )
