"""Discovery of packages stored in a local folder feed."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator
from urllib.parse import quote

from .archive import NUPKG_EXTENSION, PackageArchiveReader
from .errors import NupkgError
from .models import PackageIdentity
from .nuspec import NuspecReader
from .packages import LocalPackageInfo

logger = logging.getLogger(__name__)


def _nuspec_loader(path: Path):
    def _load() -> NuspecReader:
        with PackageArchiveReader(path) as reader:
            return reader.get_nuspec()

    return _load


def _last_write_time_utc(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


def embedded_uri(package: LocalPackageInfo, entry_path: str) -> str:
    """Build the URI addressing ``entry_path`` inside ``package``."""
    escaped = quote(entry_path.replace("\\", "/").lstrip("/"), safe="/")
    return f"{Path(package.path).resolve().as_uri()}#{escaped}"


class LocalFolderRepository:
    """Packages in ``root`` (flat) or ``root/<id>/<version>/`` (v3 layout)."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _candidates(self) -> Iterator[Path]:
        if not self.root.is_dir():
            return
        seen: set[Path] = set()
        patterns = (f"*{NUPKG_EXTENSION}", f"*/*/*{NUPKG_EXTENSION}")
        for pattern in patterns:
            for path in sorted(self.root.glob(pattern)):
                if path.is_file() and path not in seen:
                    seen.add(path)
                    yield path

    def iter_packages(self) -> Iterator[LocalPackageInfo]:
        for path in self._candidates():
            try:
                with PackageArchiveReader(path) as reader:
                    identity = reader.get_identity()
            except NupkgError as exc:
                logger.warning("skipping unreadable package %s: %s", path, exc)
                continue
            yield LocalPackageInfo(
                identity=identity,
                path=str(path),
                last_write_time_utc=_last_write_time_utc(path),
                nuspec=_nuspec_loader(path),
            )

    def find_package(self, package_id: str, version: str) -> LocalPackageInfo | None:
        wanted = PackageIdentity(id=package_id, version=version)
        for package in self.iter_packages():
            if package.identity == wanted:
                return package
        return None
