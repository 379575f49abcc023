"""
Domain exceptions package.
"""

# Base exceptions
from monnayeur.domain.exceptions.base import (
    EntityNotFoundError,
    MonnayeurException,
    ValidationError,
)

# Persistence exceptions
from monnayeur.domain.exceptions.persistence import (
    ConstraintViolationError,
    MigrationDegradedError,
)

# Session exceptions
from monnayeur.domain.exceptions.session import SessionExpiredError

__all__ = [
    # Base
    "MonnayeurException",
    "EntityNotFoundError",
    "ValidationError",
    # Persistence
    "ConstraintViolationError",
    "MigrationDegradedError",
    # Session
    "SessionExpiredError",
]
