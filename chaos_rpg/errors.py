"""Errors surfaced to callers of the generator and the store.

Soft irregularities (empty pools, unknown personalities, unknown player ids)
are logged where they happen and never raise.
"""


class ChaosRPGError(Exception):
    """Base class for every error raised by the core."""


class NotFoundError(ChaosRPGError, LookupError):
    """Raised for an unregistered top-level generator or an unknown boss id."""


class InvalidSaveDataError(ChaosRPGError, ValueError):
    """Raised by GameStore.load_game() when the blob has no usable state."""


class NoActiveBossError(ChaosRPGError, RuntimeError):
    """Raised when damaging or defeating a boss while none is current."""


class InvalidSettingsError(ChaosRPGError, ValueError):
    """Raised by GameStore.update_settings() when a value fails validation."""
