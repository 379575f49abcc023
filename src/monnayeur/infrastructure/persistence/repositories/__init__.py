"""Repository implementations."""

from monnayeur.infrastructure.persistence.repositories.identity_store import (
    IdentityStore,
)
from monnayeur.infrastructure.persistence.repositories.session_store import (
    SessionStore,
    new_session_token,
)

__all__ = [
    "IdentityStore",
    "SessionStore",
    "new_session_token",
]
