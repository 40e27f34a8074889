"""Security helpers for embedded entry paths and logged URIs."""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePath
from urllib.parse import unquote, urlsplit

from .models import EmbeddedReference

logger = logging.getLogger(__name__)

_DIRECTORY_SEPARATORS = "/\\"


def strip_leading_directory_separators(path: str) -> str:
    return path.lstrip(_DIRECTORY_SEPARATORS)


def decode_entry_path(escaped_fragment: str) -> str:
    value = escaped_fragment[1:] if escaped_fragment.startswith("#") else escaped_fragment
    return strip_leading_directory_separators(unquote(value))


def is_within_directory(root: str, target: str) -> bool:
    """Return True if ``target`` lies strictly below ``root``.

    Both paths are resolved, following symlinks; components compare case-insensitively.
    """
    root_parts = [part.casefold() for part in PurePath(_canonical(root)).parts]
    target_parts = [part.casefold() for part in PurePath(_canonical(target)).parts]
    if len(target_parts) <= len(root_parts):
        return False
    return target_parts[: len(root_parts)] == root_parts


def resolve_entry_path(archive_path: str, escaped_fragment: str) -> EmbeddedReference | None:
    entry_path = decode_entry_path(escaped_fragment)
    containing_dir = _canonical(os.path.dirname(os.path.abspath(archive_path)))
    if not entry_path:
        return None
    candidate = _canonical(os.path.join(containing_dir, entry_path))
    if not is_within_directory(containing_dir, candidate):
        logger.debug("path traversal blocked for embedded entry: %s", entry_path)
        return None
    return EmbeddedReference(
        archive_path=archive_path,
        entry_path=entry_path,
        extracted_path=candidate,
        containing_dir=containing_dir,
    )


def _canonical(path: str) -> str:
    return str(Path(path).resolve())


def redact_uri_for_log(uri: str) -> str:
    if "://" not in uri:
        return uri
    try:
        parsed = urlsplit(uri)
    except ValueError:
        return uri
    if not parsed.password and not parsed.username:
        return uri
    safe_netloc = parsed.netloc.rsplit("@", 1)[-1]
    return uri.replace(parsed.netloc, f"***@{safe_netloc}", 1)
