"""Workspace configuration for the remote file service."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

CONFIG_SECTION = "remote_files"
DEFAULT_USER_AGENT = "nupkg-remote-files/0.1"


@dataclass(frozen=True)
class RemoteFileConfig:
    timeout_seconds: float = 30.0
    chunk_size: int = 64 * 1024
    max_response_bytes: int | None = None
    user_agent: str = DEFAULT_USER_AGENT


def default_workspace_root() -> Path:
    return Path(os.environ.get("NUPKG_ROOT") or ".nupkg")


def _read_section(workspace_root: Path) -> dict[str, Any]:
    config_path = workspace_root / "config" / "config.toml"
    if not config_path.exists():
        return {}
    try:
        payload = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        logger.warning("ignoring unreadable config file %s", config_path)
        return {}
    section = payload.get(CONFIG_SECTION)
    return section if isinstance(section, dict) else {}


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def config_from_mapping(values: Mapping[str, Any]) -> RemoteFileConfig:
    defaults = RemoteFileConfig()
    max_bytes = _optional_int(values.get("max_response_bytes"))
    return RemoteFileConfig(
        timeout_seconds=max(float(values.get("timeout_seconds", defaults.timeout_seconds)), 0.1),
        chunk_size=max(int(values.get("chunk_size", defaults.chunk_size)), 1),
        max_response_bytes=max_bytes if max_bytes is None or max_bytes > 0 else None,
        user_agent=str(values.get("user_agent") or defaults.user_agent).strip() or defaults.user_agent,
    )


def load_config(workspace_root: Path | None = None) -> RemoteFileConfig:
    root = workspace_root if workspace_root is not None else default_workspace_root()
    values = _read_section(root)
    env_timeout = os.environ.get("NUPKG_TIMEOUT_SECONDS")
    if env_timeout:
        values["timeout_seconds"] = env_timeout
    env_max_bytes = os.environ.get("NUPKG_MAX_RESPONSE_BYTES")
    if env_max_bytes:
        values["max_response_bytes"] = env_max_bytes
    env_agent = os.environ.get("NUPKG_USER_AGENT")
    if env_agent:
        values["user_agent"] = env_agent
    return config_from_mapping(values)
