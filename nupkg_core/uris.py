"""Classification of source URIs handed to the remote file service."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit
from urllib.request import url2pathname

from .errors import InvalidArgumentError

FILE_SCHEME = "file"
REMOTE_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class SourceUri:
    raw: str
    scheme: str
    netloc: str
    path: str
    fragment: str

    @classmethod
    def parse(cls, value: str) -> "SourceUri":
        if not isinstance(value, str):
            raise InvalidArgumentError(f"uri must be a string, got {type(value).__name__}")
        text = value.strip()
        if not text:
            raise InvalidArgumentError("uri must not be empty")
        try:
            parts = urlsplit(text)
        except ValueError as exc:
            raise InvalidArgumentError(f"malformed uri: {value!r}") from exc
        return cls(
            raw=text,
            scheme=parts.scheme.lower(),
            netloc=parts.netloc,
            path=parts.path,
            fragment=parts.fragment,
        )

    @property
    def is_absolute(self) -> bool:
        if not self.scheme:
            return False
        # "c:\pkgs\a.nupkg" parses with a one-letter scheme; that is a path, not a URI.
        return len(self.scheme) > 1

    @property
    def is_file(self) -> bool:
        return self.is_absolute and self.scheme == FILE_SCHEME

    @property
    def is_remote(self) -> bool:
        return self.scheme in REMOTE_SCHEMES

    @property
    def local_path(self) -> str:
        if not self.is_file:
            raise InvalidArgumentError(f"not a file uri: {self.raw!r}")
        return local_path_from_uri(self)


def _coerce(uri: "str | SourceUri") -> SourceUri:
    if isinstance(uri, SourceUri):
        return uri
    return SourceUri.parse(uri)


def local_path_from_uri(uri: "str | SourceUri") -> str:
    source = _coerce(uri)
    path = url2pathname(source.path)
    host = source.netloc
    if host and host.lower() != "localhost":
        return f"//{host}{path}"
    return path


def is_embedded_uri(uri: object) -> bool:
    """Return True if ``uri`` points at a file embedded in a package archive.

    That is an absolute ``file`` URI whose fragment holds the escaped path of the
    entry inside the archive, e.g. ``file:///pkgs/a.1.0.0.nupkg#icon/logo.png``.
    """
    if isinstance(uri, SourceUri):
        source = uri
    elif isinstance(uri, str):
        try:
            source = SourceUri.parse(uri)
        except InvalidArgumentError:
            return False
    else:
        return False
    return source.is_file and len(source.fragment) > 0
