from __future__ import annotations

import zipfile
from pathlib import Path

from typer.testing import CliRunner

from nupkg_cli.main import app


def _write_package(path: Path, package_id: str, version: str, extra: dict[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(
            f"{package_id}.nuspec",
            f"<package><metadata><id>{package_id}</id><version>{version}</version></metadata></package>",
        )
        for name, data in extra.items():
            archive.writestr(name, data)
    return path


def test_fetch_writes_output_file(tmp_path: Path) -> None:
    package = _write_package(tmp_path / "feed" / "Demo.1.0.0.nupkg", "Demo", "1.0.0", {"icon.png": b"PNG"})
    out = tmp_path / "out" / "icon.png"

    result = CliRunner().invoke(
        app,
        ["--root", str(tmp_path / "ws"), "fetch", f"{package.resolve().as_uri()}#icon.png", "--output", str(out)],
    )

    assert result.exit_code == 0, result.output
    assert out.read_bytes() == b"PNG"
    assert "embedded" in result.output


def test_fetch_missing_file_exits_non_zero(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["--root", str(tmp_path / "ws"), "fetch", (tmp_path / "missing.png").resolve().as_uri()],
    )
    assert result.exit_code == 1


def test_packages_lists_local_feed(tmp_path: Path) -> None:
    _write_package(tmp_path / "feed" / "Demo.1.0.0.nupkg", "Demo", "1.0.0", {"icon.png": b"PNG"})

    result = CliRunner().invoke(app, ["packages", str(tmp_path / "feed"), "--entry", "icon.png"])

    assert result.exit_code == 0, result.output
    assert "Demo 1.0.0" in result.output
    assert "#icon.png" in result.output
