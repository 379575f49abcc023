"""
Storage engine and schema exceptions.
"""

from monnayeur.domain.exceptions.base import MonnayeurException


class ConstraintViolationError(MonnayeurException):
    """
    Raised when the storage engine rejects a write.

    Covers uniqueness and foreign key failures. The write was rolled back;
    callers must check whether an earlier attempt already landed before
    retrying a mint record.
    """

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        message = f"{operation} rejected by storage engine: {reason}"
        super().__init__(message, code="CONSTRAINT_VIOLATION")


class MigrationDegradedError(MonnayeurException):
    """A schema migration step failed structurally."""

    def __init__(self, step: str, reason: str):
        self.step = step
        message = f"Migration step '{step}' failed: {reason}"
        super().__init__(message, code="MIGRATION_DEGRADED")
