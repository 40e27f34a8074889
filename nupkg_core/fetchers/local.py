from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


class LocalFileFetcher:
    """Reads plain local files into memory."""

    def fetch_local(self, path: str | Path) -> BinaryIO | None:
        target = Path(path)
        if not target.is_file():
            return None
        try:
            return io.BytesIO(target.read_bytes())
        except OSError as exc:
            logger.debug("unable to read local file %s: %s", target, exc)
            return None
