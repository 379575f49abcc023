"""
Mint callback API schemas.

Field names on the wire are camelCase, as sent by the browser front ends.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from monnayeur.domain.entities.minted_asset import MintedAsset
from monnayeur.domain.entities.user import User
from monnayeur.domain.value_objects.platform import Platform


class CamelModel(BaseModel):
    """Base schema accepting both camelCase aliases and field names."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ================================================================
# Requests
# ================================================================


class CreateSessionRequest(CamelModel):
    """Request to start a browser mint flow for a chat user."""

    chat_id: int = Field(..., alias="telegramId")
    display_name: Optional[str] = Field(default=None, alias="username")


class WalletConnectedRequest(CamelModel):
    """Wallet-connected notification from a browser front end."""

    wallet_address: str = Field(..., min_length=1, alias="walletAddress")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    social_id: Optional[int] = Field(default=None, alias="socialPlatformId")
    display_name: Optional[str] = Field(default=None, alias="username")


class MintConfirmRequest(CamelModel):
    """Mint confirmation from a browser front end."""

    token_id: int = Field(..., alias="tokenId")
    transaction_ref: str = Field(..., min_length=1, alias="transactionRef")
    wallet_address: str = Field(..., min_length=1, alias="walletAddress")
    metadata_locator: str = Field(default="", alias="metadataLocator")
    block_height: Optional[int] = Field(default=None, alias="blockHeight")
    origin_platform: Optional[Platform] = Field(default=None, alias="originPlatform")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    social_id: Optional[int] = Field(default=None, alias="socialPlatformId")
    display_name: Optional[str] = Field(default=None, alias="username")


# ================================================================
# Responses
# ================================================================


class UserResponse(CamelModel):
    """Public view of a user."""

    id: int
    chat_id: Optional[int] = Field(default=None, alias="telegramId")
    social_id: Optional[int] = Field(default=None, alias="socialPlatformId")
    display_name: Optional[str] = Field(default=None, alias="username")
    wallet_address: Optional[str] = Field(default=None, alias="walletAddress")
    minted_count: int = Field(default=0, alias="nftsMinted")
    last_mint_at: Optional[datetime] = Field(default=None, alias="lastMintAt")
    platform: Platform

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            chat_id=user.chat_id,
            social_id=user.social_id,
            display_name=user.display_name,
            wallet_address=user.wallet_address,
            minted_count=user.minted_count,
            last_mint_at=user.last_mint_at,
            platform=user.platform,
        )


class AssetResponse(CamelModel):
    """Public view of a minted asset."""

    token_id: int = Field(..., alias="tokenId")
    owner_wallet_address: str = Field(..., alias="walletAddress")
    metadata_locator: str = Field(..., alias="metadataLocator")
    transaction_ref: str = Field(..., alias="transactionRef")
    block_height: Optional[int] = Field(default=None, alias="blockHeight")
    origin_platform: Platform = Field(..., alias="originPlatform")
    minted_at: datetime = Field(..., alias="mintedAt")

    @classmethod
    def from_entity(cls, asset: MintedAsset) -> "AssetResponse":
        return cls(
            token_id=asset.token_id,
            owner_wallet_address=asset.owner_wallet_address,
            metadata_locator=asset.metadata_locator,
            transaction_ref=asset.transaction_ref,
            block_height=asset.block_height,
            origin_platform=asset.origin_platform,
            minted_at=asset.minted_at,
        )


class MintFlowResponse(CamelModel):
    """Result of starting a mint flow."""

    allowed: bool
    reason: Optional[str] = None
    remaining_seconds: Optional[int] = Field(default=None, alias="remainingSeconds")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    webapp_url: Optional[str] = Field(default=None, alias="webappUrl")
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")


class CallbackResponse(CamelModel):
    """Result of a wallet or mint callback."""

    success: bool
    status: str
    message: str
    user: Optional[UserResponse] = None
    asset: Optional[AssetResponse] = None


class UserStatsResponse(CamelModel):
    """A user's minting history."""

    success: bool = True
    user: Optional[UserResponse] = None
    minted_count: int = Field(default=0, alias="nftsMinted")
    asset_count: int = Field(default=0, alias="assetCount")
    nfts: List[AssetResponse] = Field(default_factory=list)
