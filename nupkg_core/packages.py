"""On-disk package descriptor used by local repositories."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable

from .archive import NUPKG_EXTENSION, PackageArchiveReader
from .errors import InvalidArgumentError
from .models import PackageIdentity
from .nuspec import NuspecReader

_UNSET = object()


class LocalPackageInfo:
    """A package found on disk.

    ``nuspec`` is a zero-argument loader; it runs at most once and the reader it
    returns is cached for the lifetime of this object.
    """

    def __init__(
        self,
        identity: PackageIdentity,
        path: str,
        last_write_time_utc: datetime,
        nuspec: Callable[[], NuspecReader],
    ) -> None:
        if identity is None:
            raise InvalidArgumentError("identity is required")
        if path is None:
            raise InvalidArgumentError("path is required")
        if nuspec is None:
            raise InvalidArgumentError("nuspec is required")
        self._identity = identity
        self._path = str(path)
        self._last_write_time_utc = last_write_time_utc
        self._nuspec_loader = nuspec
        self._nuspec: object = _UNSET
        self._lock = threading.Lock()

    @property
    def identity(self) -> PackageIdentity:
        return self._identity

    @property
    def path(self) -> str:
        return self._path

    @property
    def last_write_time_utc(self) -> datetime:
        return self._last_write_time_utc

    @property
    def nuspec(self) -> NuspecReader:
        value = self._nuspec
        if value is _UNSET:
            with self._lock:
                if self._nuspec is _UNSET:
                    self._nuspec = self._nuspec_loader()
                value = self._nuspec
        return value  # type: ignore[return-value]

    @property
    def is_nupkg(self) -> bool:
        return self._path.lower().endswith(NUPKG_EXTENSION)

    def get_reader(self) -> PackageArchiveReader:
        """Open a new reader over the package; the caller must close it."""
        return PackageArchiveReader(self._path)

    def __repr__(self) -> str:
        return f"LocalPackageInfo(identity={self._identity!s}, path={self._path!r})"
