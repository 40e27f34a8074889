"""HTTP host exposing the remote file service."""

from .api import make_app

__all__ = ["make_app"]
