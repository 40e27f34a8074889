"""Remote file service: resolves a URI into a readable byte stream.

Three kinds of URI are handled:

* ``file:///pkgs/a.1.0.0.nupkg#icon/logo.png`` - an entry embedded in a local
  package archive. A file already extracted next to the archive wins over the
  archive entry.
* ``file:///local/icon.png`` - a plain local file.
* anything else (normally ``http``/``https``) - downloaded.

Expected failures never raise; they produce ``None``. Only contract violations
(a missing or relative URI, use after :meth:`RemoteFileService.close`) raise.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import BinaryIO, Protocol

from .cancellation import CancellationToken
from .config import RemoteFileConfig, load_config
from .errors import InvalidArgumentError, ServiceClosedError
from .fetchers import ArchiveEntryFetcher, LocalFileFetcher, RemoteFileFetcher
from .models import FileSourceStatus, RemoteFileResult
from .security import redact_uri_for_log, resolve_entry_path
from .uris import SourceUri, is_embedded_uri

logger = logging.getLogger(__name__)


class SupportsClose(Protocol):
    def close(self) -> None: ...


class RemoteFileService:
    def __init__(
        self,
        *,
        archive_fetcher: ArchiveEntryFetcher | None = None,
        local_fetcher: LocalFileFetcher | None = None,
        remote_fetcher: RemoteFileFetcher | None = None,
        authorization_client: SupportsClose | None = None,
    ) -> None:
        self.archive_fetcher = archive_fetcher or ArchiveEntryFetcher()
        self.local_fetcher = local_fetcher or LocalFileFetcher()
        self.remote_fetcher = remote_fetcher or RemoteFileFetcher()
        self._authorization_client = authorization_client
        self._closed = False
        self._close_lock = threading.Lock()

    def __enter__(self) -> "RemoteFileService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
            client, self._authorization_client = self._authorization_client, None
        self.remote_fetcher.close()
        if client is not None:
            client.close()

    def get_remote_file(
        self,
        uri: str | SourceUri,
        cancellation_token: CancellationToken | None = None,
    ) -> BinaryIO | None:
        return self.fetch(uri, cancellation_token).stream

    def fetch(
        self,
        uri: str | SourceUri,
        cancellation_token: CancellationToken | None = None,
    ) -> RemoteFileResult:
        if self._closed:
            raise ServiceClosedError("remote file service is closed")
        source = _validate_uri(uri)
        if is_embedded_uri(source):
            return self._fetch_embedded(source, cancellation_token)
        if source.is_file:
            stream = self.local_fetcher.fetch_local(source.local_path)
            return RemoteFileResult.of(stream, FileSourceStatus.LOCAL)
        if not source.is_remote:
            logger.debug("no dedicated handler for scheme %r, trying download", source.scheme)
        stream = self.remote_fetcher.fetch_remote(source.raw, cancellation_token)
        return RemoteFileResult.of(stream, FileSourceStatus.DOWNLOADED)

    def _fetch_embedded(
        self,
        source: SourceUri,
        cancellation_token: CancellationToken | None,
    ) -> RemoteFileResult:
        archive_path = source.local_path
        if not os.path.isfile(archive_path):
            logger.debug("package archive not found: %s", archive_path)
            return RemoteFileResult.absent()

        reference = resolve_entry_path(archive_path, source.fragment)
        if reference is None:
            logger.debug("rejected embedded reference: %s", redact_uri_for_log(source.raw))
            return RemoteFileResult.absent()

        if os.path.isfile(reference.extracted_path):
            try:
                return RemoteFileResult.of(open(reference.extracted_path, "rb"), FileSourceStatus.EMBEDDED)
            except OSError as exc:
                logger.debug("unable to open extracted file %s: %s", reference.extracted_path, exc)

        stream = self.archive_fetcher.fetch_entry(archive_path, reference.entry_path, cancellation_token)
        return RemoteFileResult.of(stream, FileSourceStatus.EMBEDDED)


def _validate_uri(uri: object) -> SourceUri:
    if uri is None:
        raise InvalidArgumentError("uri is required")
    if isinstance(uri, SourceUri):
        source = uri
    elif isinstance(uri, str):
        source = SourceUri.parse(uri)
    else:
        raise InvalidArgumentError(f"uri must be a string, got {type(uri).__name__}")
    if not source.is_absolute:
        raise InvalidArgumentError(f"uri must be absolute: {source.raw!r}")
    return source


def create_service(config: RemoteFileConfig | None = None) -> RemoteFileService:
    config = config or load_config()
    return RemoteFileService(
        archive_fetcher=ArchiveEntryFetcher(chunk_size=config.chunk_size),
        remote_fetcher=RemoteFileFetcher(config),
    )
