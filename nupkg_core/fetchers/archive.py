from __future__ import annotations

import io
import logging
from typing import BinaryIO

from ..archive import PackageArchiveReader
from ..cancellation import CancellationToken, check_cancelled
from ..errors import OperationCancelledError, PackageArchiveError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class ArchiveEntryFetcher:
    """Copies a single package entry into memory so the archive can be closed."""

    def __init__(self, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.chunk_size = max(int(chunk_size), 1)

    def fetch_entry(
        self,
        archive_path: str,
        relative_path: str,
        cancellation_token: CancellationToken | None = None,
    ) -> BinaryIO | None:
        try:
            check_cancelled(cancellation_token)
            buffer = io.BytesIO()
            with PackageArchiveReader(archive_path) as reader, reader.get_stream(relative_path) as entry:
                for chunk in iter(lambda: entry.read(self.chunk_size), b""):
                    check_cancelled(cancellation_token)
                    buffer.write(chunk)
            buffer.seek(0)
            return buffer
        except OperationCancelledError:
            logger.debug("archive read cancelled: %s#%s", archive_path, relative_path)
            return None
        except PackageArchiveError as exc:
            logger.debug("archive entry unavailable: %s", exc)
            return None
        except Exception:
            logger.warning("failed reading '%s' from %s", relative_path, archive_path, exc_info=True)
            return None
