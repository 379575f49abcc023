"""
Domain repository interfaces.
"""

from monnayeur.domain.repositories.i_identity_store import IIdentityStore
from monnayeur.domain.repositories.i_session_store import ISessionStore

__all__ = ["IIdentityStore", "ISessionStore"]
