"""
Bridging session exceptions.
"""

from monnayeur.domain.exceptions.base import MonnayeurException


class SessionExpiredError(MonnayeurException):
    """Raised when a session token is unknown or past its expiry."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(
            "Session expired or not found",
            code="SESSION_EXPIRED",
        )
