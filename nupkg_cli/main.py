from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from nupkg_core.config import default_workspace_root, load_config
from nupkg_core.errors import InvalidArgumentError
from nupkg_core.repository import LocalFolderRepository, embedded_uri
from nupkg_core.service import create_service
from nupkg_host import make_app

app = typer.Typer(help="Fetch files referenced from NuGet style packages")

_state = {"root": None}


def _workspace_root() -> Path:
    return _state["root"] or default_workspace_root()


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    root: Optional[Path] = typer.Option(None, "--root", help="Workspace root holding config/config.toml"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _state["root"] = root


@app.command()
def fetch(
    uri: str = typer.Argument(..., help="file://, file://...nupkg#entry or http(s):// URI"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
) -> None:
    """Fetch a file and write its bytes."""
    with create_service(load_config(_workspace_root())) as service:
        try:
            result = service.fetch(uri)
        except InvalidArgumentError as exc:
            raise typer.BadParameter(str(exc)) from exc
        if not result.found:
            typer.echo(f"[nupkg:fetch] no content for {uri}", err=True)
            raise typer.Exit(code=1)
        with result.stream as stream:
            data = stream.read()
    if output is None:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    typer.echo(f"[nupkg:fetch] {result.status.value} {len(data)} bytes -> {output}")


@app.command()
def packages(
    folder: Path = typer.Argument(..., help="Local package folder"),
    entry: Optional[str] = typer.Option(None, "--entry", help="Also print the URI of this entry"),
) -> None:
    """List packages found in a local folder."""
    repository = LocalFolderRepository(folder)
    count = 0
    for package in repository.iter_packages():
        count += 1
        line = f"{package.identity.id} {package.identity.version} {package.path}"
        if entry:
            line = f"{line} {embedded_uri(package, entry)}"
        typer.echo(line)
    if count == 0:
        typer.echo(f"[nupkg:packages] no packages in {folder}", err=True)


@app.command()
def serve(
    host: str = typer.Option(os.getenv("NUPKG_HOST", "127.0.0.1"), "--host"),
    port: int = typer.Option(int(os.getenv("NUPKG_PORT", "8790")), "--port"),
) -> None:
    """Serve the remote file service over HTTP."""
    service = create_service(load_config(_workspace_root()))
    uvicorn.run(make_app(service), host=host, port=port)


def main() -> int:
    try:
        app()
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    return 0
