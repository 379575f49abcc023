"""
User entity - one person reachable through either identity namespace.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from monnayeur.domain.value_objects.platform import Platform
from monnayeur.utils.clock import utc_now


@dataclass
class User:
    """
    User entity.

    Business rules:
    - At least one of chat_id / social_id is set
    - id is assigned by the store on creation and never reused
    - minted_count never decreases
    - wallet_address is last-connected-wallet-wins
    """

    id: Optional[int] = field(default=None)
    chat_id: Optional[int] = field(default=None)
    social_id: Optional[int] = field(default=None)
    display_name: Optional[str] = field(default=None)
    wallet_address: Optional[str] = field(default=None)
    minted_count: int = field(default=0)
    last_mint_at: Optional[datetime] = field(default=None)
    platform: Platform = field(default=Platform.TELEGRAM)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        """Validate user data after initialization."""
        if self.chat_id is None and self.social_id is None:
            raise ValueError("User requires a chat id or a social id")

        if self.minted_count < 0:
            raise ValueError("Minted count cannot be negative")

    @property
    def has_wallet(self) -> bool:
        """Whether a wallet has been connected."""
        return bool(self.wallet_address)

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "social_id": self.social_id,
            "display_name": self.display_name,
            "wallet_address": self.wallet_address,
            "minted_count": self.minted_count,
            "last_mint_at": (
                self.last_mint_at.isoformat() if self.last_mint_at else None
            ),
            "platform": self.platform.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
