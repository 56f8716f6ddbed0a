"""Exceptions raised by the platform composition engine."""
from typing import Iterable, List, Optional


class PlatformError(Exception):
    """Base class for all platformctl errors."""
    pass


class InvalidPlatformSpecError(PlatformError, ValueError):
    """Raised when a platform spec fails validation.

    All problems found in a single pass are collected in ``errors`` so the
    caller sees every issue at once.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("Invalid platform spec: " + "; ".join(self.errors))


class MalformedLabelError(InvalidPlatformSpecError):
    """Raised when a node label would corrupt the bootstrap payload."""
    pass


class UnsupportedVersionError(PlatformError):
    """Raised when no kubectl shim exists for a Kubernetes version."""

    def __init__(self, version: str, reason: Optional[str] = None):
        self.version = version
        super().__init__(reason or f"Unsupported Kubernetes version: {version}")


class BootstrapError(PlatformError):
    """Raised when a bootstrap payload cannot be rendered."""
    pass


class SpecLoadError(PlatformError):
    """Raised when a platform file cannot be read or fails schema validation."""
    pass
