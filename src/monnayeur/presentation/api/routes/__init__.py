"""API routes."""
from monnayeur.presentation.api.routes import (
    callbacks,
    health,
    sessions,
    users,
)

__all__ = [
    "callbacks",
    "health",
    "sessions",
    "users",
]
