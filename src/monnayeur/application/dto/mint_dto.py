"""
Mint flow Data Transfer Objects.

Typed results handed back to the chat handler and the HTTP callback
boundary. Refusals and lookup misses travel as values, not exceptions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from monnayeur.domain.entities.bridge_session import BridgeSession
from monnayeur.domain.entities.minted_asset import MintedAsset
from monnayeur.domain.entities.user import User
from monnayeur.domain.services.eligibility_policy import EligibilityDecision


class CallbackStatus(str, Enum):
    """Outcome of a webapp or webhook callback."""

    RECORDED = "recorded"
    CONNECTED = "connected"
    DUPLICATE = "duplicate"
    SESSION_EXPIRED = "session_expired"
    UNKNOWN_USER = "unknown_user"
    CONSTRAINT_VIOLATION = "constraint_violation"

    @property
    def is_success(self) -> bool:
        return self in (
            CallbackStatus.RECORDED,
            CallbackStatus.CONNECTED,
            CallbackStatus.DUPLICATE,
        )


@dataclass
class CallbackResult:
    """Result of a wallet-connected or mint-confirmed callback."""

    status: CallbackStatus
    message: str
    user: Optional[User] = None
    asset: Optional[MintedAsset] = None


@dataclass
class MintFlowResult:
    """Result of starting a browser mint flow from the chat client."""

    decision: EligibilityDecision
    user: User
    session: Optional[BridgeSession] = None
    webapp_url: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.decision.allowed


@dataclass
class CollectionSummary:
    """A user's minting history."""

    user: Optional[User]
    minted_count: int = 0
    asset_count: int = 0
    assets: List[MintedAsset] = field(default_factory=list)
