"""
BridgeSession entity - short-lived token linking a webapp to a chat user.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from monnayeur.utils.clock import utc_now


@dataclass
class BridgeSession:
    """
    Capability token handed to the browser minting front end.

    Valid for reads only while now < expires_at. Expired rows may still
    exist in the store until the next sweep.
    """

    token: str
    owner_chat_id: int
    expires_at: datetime
    wallet_address: Optional[str] = field(default=None)
    payload: Optional[Any] = field(default=None)
    created_at: datetime = field(default_factory=utc_now)

    def is_live(self, now: datetime) -> bool:
        """Whether the session can still be used at ``now``."""
        return now < self.expires_at

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "token": self.token,
            "owner_chat_id": self.owner_chat_id,
            "wallet_address": self.wallet_address,
            "payload": self.payload,
            "expires_at": self.expires_at.isoformat(),
            "created_at": self.created_at.isoformat(),
        }
