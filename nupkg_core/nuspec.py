"""Reader for the nuspec manifest stored at the root of a package."""

from __future__ import annotations

from typing import BinaryIO

from lxml import etree

from .errors import NuspecError
from .models import PackageIdentity

NUSPEC_EXTENSION = ".nuspec"


def _local_name(element: etree._Element) -> str:
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)


class NuspecReader:
    """Namespace agnostic view over the ``<metadata>`` section of a nuspec."""

    def __init__(self, document: bytes | BinaryIO) -> None:
        data = document if isinstance(document, bytes) else document.read()
        try:
            root = etree.fromstring(data, _parser())
        except etree.XMLSyntaxError as exc:
            raise NuspecError(f"invalid nuspec document: {exc}") from exc
        metadata = next((child for child in root if _local_name(child) == "metadata"), None)
        if metadata is None:
            raise NuspecError("nuspec has no metadata element")
        self._metadata = metadata

    def _find(self, name: str) -> etree._Element | None:
        for child in self._metadata:
            if _local_name(child) == name:
                return child
        return None

    def _text(self, name: str) -> str | None:
        element = self._find(name)
        if element is None or element.text is None:
            return None
        value = element.text.strip()
        return value or None

    def get_id(self) -> str:
        value = self._text("id")
        if not value:
            raise NuspecError("nuspec metadata is missing the package id")
        return value

    def get_version(self) -> str:
        value = self._text("version")
        if not value:
            raise NuspecError("nuspec metadata is missing the package version")
        return value

    def get_identity(self) -> PackageIdentity:
        return PackageIdentity(id=self.get_id(), version=self.get_version())

    def get_icon(self) -> str | None:
        return self._text("icon")

    def get_icon_url(self) -> str | None:
        return self._text("iconUrl")

    def get_description(self) -> str | None:
        return self._text("description")

    def get_authors(self) -> list[str]:
        value = self._text("authors")
        if not value:
            return []
        return [item.strip() for item in value.split(",") if item.strip()]

    def get_metadata(self) -> dict[str, str]:
        values: dict[str, str] = {}
        for child in self._metadata:
            name = _local_name(child)
            if not name or len(child):
                continue
            text = (child.text or "").strip()
            if text:
                values[name] = text
        return values
