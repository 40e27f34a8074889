"""Zip backed reader for ``.nupkg`` package archives."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import BinaryIO
from urllib.parse import unquote

from .errors import PackageArchiveError
from .models import PackageIdentity
from .nuspec import NUSPEC_EXTENSION, NuspecReader

NUPKG_EXTENSION = ".nupkg"


def normalize_entry_path(relative_path: str) -> str:
    return relative_path.replace("\\", "/").lstrip("/")


class PackageArchiveReader:
    """Read entries of a package archive.

    Entry names inside a nupkg are stored percent-escaped, so lookups fall back
    to a case-insensitive match on the unescaped name.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        try:
            self._zip = zipfile.ZipFile(self.path)
        except FileNotFoundError as exc:
            raise PackageArchiveError(f"package archive not found: {self.path}") from exc
        except (zipfile.BadZipFile, OSError) as exc:
            raise PackageArchiveError(f"unable to open package archive {self.path}: {exc}") from exc

    def __enter__(self) -> "PackageArchiveReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def get_files(self) -> list[str]:
        return [info.filename for info in self._zip.infolist() if not info.is_dir()]

    def _lookup(self, relative_path: str) -> zipfile.ZipInfo:
        wanted = normalize_entry_path(relative_path)
        if not wanted:
            raise PackageArchiveError("empty entry path")
        entries = [info for info in self._zip.infolist() if not info.is_dir()]
        for info in entries:
            if info.filename == wanted:
                return info
        folded = wanted.casefold()
        for info in entries:
            if info.filename.casefold() == folded:
                return info
        for info in entries:
            if unquote(info.filename).casefold() == folded:
                return info
        raise PackageArchiveError(f"entry '{wanted}' not found in {self.path.name}")

    def get_stream(self, relative_path: str) -> BinaryIO:
        info = self._lookup(relative_path)
        try:
            return self._zip.open(info)
        except (zipfile.BadZipFile, OSError, RuntimeError) as exc:
            raise PackageArchiveError(f"unable to read entry '{info.filename}': {exc}") from exc

    def get_nuspec_file(self) -> str:
        candidates = [
            name
            for name in self.get_files()
            if "/" not in name and name.lower().endswith(NUSPEC_EXTENSION)
        ]
        if not candidates:
            raise PackageArchiveError(f"no nuspec found in {self.path.name}")
        if len(candidates) > 1:
            raise PackageArchiveError(f"multiple nuspec files found in {self.path.name}")
        return candidates[0]

    def get_nuspec(self) -> NuspecReader:
        with self.get_stream(self.get_nuspec_file()) as stream:
            return NuspecReader(stream.read())

    def get_identity(self) -> PackageIdentity:
        return self.get_nuspec().get_identity()
