from __future__ import annotations


class WaveStackError(Exception):
    """Base error for the wavestack library."""


class ConfigurationError(WaveStackError, ValueError):
    """Raised when buffer or envelope parameters describe an impossible shape."""


class EntryNotFoundError(WaveStackError, LookupError):
    """Raised when a stack lookup by identity finds no matching entry."""


class InvalidEntryError(WaveStackError, TypeError):
    """Raised when something that is not a SampleBuffer is put into a stack."""


class StackCycleError(WaveStackError, ValueError):
    """Raised when a stack would contain itself, directly or transitively."""
