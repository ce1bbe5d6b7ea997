from __future__ import annotations


class ValidationError(ValueError):
    """User input rejected before anything was mutated or saved."""


class InvalidBackup(ValueError):
    """Restore payload could not be parsed or is missing a required container."""


class CorruptStore(RuntimeError):
    """The persisted snapshot exists but cannot be read back."""
