"""Core retrieval logic for files referenced from NuGet style packages."""

from .archive import NUPKG_EXTENSION, PackageArchiveReader
from .cancellation import CancellationToken
from .config import RemoteFileConfig, load_config
from .errors import (
    InvalidArgumentError,
    NupkgError,
    NuspecError,
    OperationCancelledError,
    PackageArchiveError,
    ServiceClosedError,
)
from .fetchers import ArchiveEntryFetcher, LocalFileFetcher, RemoteFileFetcher
from .models import EmbeddedReference, FileSourceStatus, PackageIdentity, RemoteFileResult
from .nuspec import NuspecReader
from .packages import LocalPackageInfo
from .repository import LocalFolderRepository, embedded_uri
from .security import resolve_entry_path
from .service import RemoteFileService, create_service
from .uris import SourceUri, is_embedded_uri

__all__ = [
    "ArchiveEntryFetcher",
    "CancellationToken",
    "EmbeddedReference",
    "FileSourceStatus",
    "InvalidArgumentError",
    "LocalFileFetcher",
    "LocalFolderRepository",
    "LocalPackageInfo",
    "NUPKG_EXTENSION",
    "NupkgError",
    "NuspecError",
    "NuspecReader",
    "OperationCancelledError",
    "PackageArchiveError",
    "PackageArchiveReader",
    "PackageIdentity",
    "RemoteFileConfig",
    "RemoteFileFetcher",
    "RemoteFileResult",
    "RemoteFileService",
    "ServiceClosedError",
    "SourceUri",
    "create_service",
    "embedded_uri",
    "is_embedded_uri",
    "load_config",
    "resolve_entry_path",
]
