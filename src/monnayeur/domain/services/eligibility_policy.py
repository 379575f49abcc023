"""
Mint eligibility policy.

Pure decision logic over a user's mint history: lifetime cap first, then
cooldown. Performs no writes.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from monnayeur.domain.entities.user import User


class DenialReason(str, Enum):
    """Why a mint was refused."""

    LIFETIME_CAP_REACHED = "lifetime_cap_reached"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class EligibilityDecision:
    """Outcome of an eligibility check."""

    allowed: bool
    reason: Optional[DenialReason] = None
    remaining_seconds: Optional[int] = None

    @classmethod
    def allow(cls) -> "EligibilityDecision":
        return cls(allowed=True)

    @classmethod
    def cap_reached(cls) -> "EligibilityDecision":
        return cls(allowed=False, reason=DenialReason.LIFETIME_CAP_REACHED)

    @classmethod
    def cooldown(cls, remaining_seconds: int) -> "EligibilityDecision":
        return cls(
            allowed=False,
            reason=DenialReason.COOLDOWN,
            remaining_seconds=remaining_seconds,
        )


class MintEligibilityPolicy:
    """
    Cooldown and lifetime-cap gate for new mints.

    Business rules:
    - A user at or above max_mints is always denied, whatever the timing
    - Otherwise a user who minted less than cooldown_seconds ago is denied
      with the remaining wait, rounded up
    - A user never seen before is allowed
    """

    def __init__(self, max_mints: int = 10, cooldown_seconds: int = 60):
        """
        Initialize policy.

        Args:
            max_mints: Lifetime mint cap per user
            cooldown_seconds: Minimum seconds between two mints
        """
        if max_mints < 1:
            raise ValueError("max_mints must be at least 1")
        if cooldown_seconds < 0:
            raise ValueError("cooldown_seconds cannot be negative")

        self.max_mints = max_mints
        self.cooldown_seconds = cooldown_seconds

    def evaluate(self, user: Optional[User], now: datetime) -> EligibilityDecision:
        """
        Decide whether ``user`` may mint at ``now``.

        Args:
            user: Resolved user, or None if the caller has no row yet
            now: Current time (naive UTC)

        Returns:
            EligibilityDecision
        """
        if user is None:
            return EligibilityDecision.allow()

        if user.minted_count >= self.max_mints:
            return EligibilityDecision.cap_reached()

        if user.last_mint_at is not None:
            elapsed = (now - user.last_mint_at).total_seconds()
            if elapsed < self.cooldown_seconds:
                remaining = math.ceil(self.cooldown_seconds - elapsed)
                return EligibilityDecision.cooldown(remaining)

        return EligibilityDecision.allow()
