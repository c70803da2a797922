"""Unified exception hierarchy for phonescan."""


class PhonescanError(Exception):
    """Base exception for all phonescan errors."""


class CollaboratorError(PhonescanError):
    """A collaborator (device command or record store) failed.

    Aborts the current ingestion or query as a whole.
    """


class ExecutionError(CollaboratorError):
    """Device command failed, wrote to stderr, or timed out."""


class StoreError(CollaboratorError):
    """Record store operation failed."""
