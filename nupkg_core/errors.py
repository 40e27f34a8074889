"""Error types raised by the nupkg remote file core."""

from __future__ import annotations


class NupkgError(RuntimeError):
    """Base error for package file retrieval."""


class InvalidArgumentError(NupkgError, ValueError):
    """Raised when a caller passes an argument that violates the contract."""


class OperationCancelledError(NupkgError):
    """Raised when a cancellation token was triggered."""


class PackageArchiveError(NupkgError):
    """Raised when a package archive or one of its entries cannot be read."""


class NuspecError(NupkgError):
    """Raised when a nuspec manifest is missing or malformed."""


class ServiceClosedError(NupkgError):
    """Raised when a closed service is used."""
