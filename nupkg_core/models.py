"""Datatypes shared by the fetchers and the remote file service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class EmbeddedReference:
    archive_path: str
    entry_path: str
    extracted_path: str
    containing_dir: str


class FileSourceStatus(str, Enum):
    EMBEDDED = "embedded"
    DOWNLOADED = "downloaded"
    LOCAL = "local"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RemoteFileResult:
    stream: BinaryIO | None
    status: FileSourceStatus

    @property
    def found(self) -> bool:
        return self.stream is not None

    @classmethod
    def absent(cls) -> "RemoteFileResult":
        return cls(stream=None, status=FileSourceStatus.NOT_FOUND)

    @classmethod
    def of(cls, stream: BinaryIO | None, status: FileSourceStatus) -> "RemoteFileResult":
        if stream is None:
            return cls.absent()
        return cls(stream=stream, status=status)


@dataclass(frozen=True)
class PackageIdentity:
    id: str
    version: str

    def __post_init__(self) -> None:
        if not str(self.id or "").strip():
            raise InvalidArgumentError("package id is required")
        if not str(self.version or "").strip():
            raise InvalidArgumentError("package version is required")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageIdentity):
            return NotImplemented
        return self.id.lower() == other.id.lower() and self.version.lower() == other.version.lower()

    def __hash__(self) -> int:
        return hash((self.id.lower(), self.version.lower()))

    def __str__(self) -> str:
        return f"{self.id}.{self.version}"
