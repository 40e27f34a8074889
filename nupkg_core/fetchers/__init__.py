from .archive import ArchiveEntryFetcher
from .local import LocalFileFetcher
from .remote import RemoteFileFetcher

__all__ = ["ArchiveEntryFetcher", "LocalFileFetcher", "RemoteFileFetcher"]
