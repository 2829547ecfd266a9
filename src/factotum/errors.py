"""Exceptions raised by factotum.

Only session setup failures are raised; per-artifact failures are recorded as
ArtifactResult entries instead (see persister.py).
"""


class FactotumError(Exception):
    """Base class for fatal factotum errors"""
    pass


class ConfigError(FactotumError):
    """Raised when the configuration cannot be turned into a CaptureConfig"""
    pass


class OutputDirectoryError(FactotumError):
    """Raised when the output directory cannot be created"""
    pass


class SessionError(FactotumError):
    """Raised when the browser or its CDP session cannot be set up"""
    pass
