"""
User API routes.

- GET /users/stats - Minting history by chat id, social id or wallet
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from monnayeur.application.use_cases.get_user_collection import (
    GetUserCollection,
    GetUserCollectionQuery,
)
from monnayeur.di.dependencies import get_get_user_collection
from monnayeur.presentation.schemas.mint_schemas import (
    AssetResponse,
    UserResponse,
    UserStatsResponse,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/stats",
    response_model=UserStatsResponse,
    summary="Get user stats",
    description="Minted count and assets, newest first",
)
async def get_user_stats(
    chat_id: Optional[int] = Query(default=None, alias="telegramId"),
    social_id: Optional[int] = Query(default=None, alias="socialPlatformId"),
    wallet_address: Optional[str] = Query(default=None, alias="walletAddress"),
    use_case: GetUserCollection = Depends(get_get_user_collection),
) -> UserStatsResponse:
    """
    Get a user's minting history.

    Unknown users get an empty result, not a 404.
    """
    summary = await use_case.execute(
        GetUserCollectionQuery(
            chat_id=chat_id,
            social_id=social_id,
            wallet_address=wallet_address,
        )
    )

    return UserStatsResponse(
        user=UserResponse.from_entity(summary.user) if summary.user else None,
        minted_count=summary.minted_count,
        asset_count=summary.asset_count,
        nfts=[AssetResponse.from_entity(asset) for asset in summary.assets],
    )
