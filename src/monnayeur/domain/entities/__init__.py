"""
Domain entities.
"""

from monnayeur.domain.entities.bridge_session import BridgeSession
from monnayeur.domain.entities.minted_asset import MintedAsset
from monnayeur.domain.entities.user import User

__all__ = ["BridgeSession", "MintedAsset", "User"]
