"""
API middleware for Monnayeur.
"""

from monnayeur.presentation.api.middleware.error_handler import (
    monnayeur_exception_handler,
)
from monnayeur.presentation.api.middleware.request_id_middleware import (
    RequestIDMiddleware,
)

__all__ = ["monnayeur_exception_handler", "RequestIDMiddleware"]
