"""Application data transfer objects."""

from monnayeur.application.dto.mint_dto import (
    CallbackResult,
    CallbackStatus,
    CollectionSummary,
    MintFlowResult,
)

__all__ = [
    "CallbackResult",
    "CallbackStatus",
    "CollectionSummary",
    "MintFlowResult",
]
