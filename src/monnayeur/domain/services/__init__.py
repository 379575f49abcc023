"""
Domain services.
"""

from monnayeur.domain.services.eligibility_policy import (
    DenialReason,
    EligibilityDecision,
    MintEligibilityPolicy,
)

__all__ = [
    "DenialReason",
    "EligibilityDecision",
    "MintEligibilityPolicy",
]
