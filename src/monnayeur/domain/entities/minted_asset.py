"""
MintedAsset entity - one confirmed mint, append-only.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from monnayeur.domain.value_objects.platform import Platform
from monnayeur.utils.clock import utc_now


@dataclass
class MintedAsset:
    """
    MintedAsset entity.

    owner_wallet_address is the wallet used at mint time, kept even if the
    owner later connects a different wallet.
    """

    token_id: int
    owner_id: int
    owner_wallet_address: str
    metadata_locator: str
    transaction_ref: str
    block_height: Optional[int] = field(default=None)
    origin_platform: Platform = field(default=Platform.TELEGRAM)
    id: Optional[int] = field(default=None)
    minted_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        """Validate asset data after initialization."""
        if not self.transaction_ref:
            raise ValueError("Transaction reference is required")

        if not self.owner_wallet_address:
            raise ValueError("Owner wallet address is required")

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "id": self.id,
            "token_id": self.token_id,
            "owner_id": self.owner_id,
            "owner_wallet_address": self.owner_wallet_address,
            "metadata_locator": self.metadata_locator,
            "transaction_ref": self.transaction_ref,
            "block_height": self.block_height,
            "origin_platform": self.origin_platform.value,
            "minted_at": self.minted_at.isoformat(),
        }
