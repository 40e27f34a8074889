from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from nupkg_core.archive import PackageArchiveReader, normalize_entry_path
from nupkg_core.errors import NuspecError, PackageArchiveError
from nupkg_core.models import PackageIdentity
from nupkg_core.nuspec import NuspecReader

NUSPEC_NS = "http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd"


def _nuspec(package_id: str = "Demo.Package", version: str = "1.0.0", *, namespace: str | None = NUSPEC_NS) -> bytes:
    xmlns = f' xmlns="{namespace}"' if namespace else ""
    return (
        f'<?xml version="1.0" encoding="utf-8"?>\n'
        f"<package{xmlns}>\n"
        f"  <metadata>\n"
        f"    <id>{package_id}</id>\n"
        f"    <version>{version}</version>\n"
        f"    <authors>alice, bob</authors>\n"
        f"    <description>Demo package</description>\n"
        f"    <icon>images/icon.png</icon>\n"
        f"    <iconUrl>https://example.com/icon.png</iconUrl>\n"
        f"    <dependencies><group targetFramework=\"net8.0\" /></dependencies>\n"
        f"  </metadata>\n"
        f"</package>\n"
    ).encode("utf-8")


def _write_nupkg(path: Path, entries: dict[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return path


def test_get_stream_reads_entry(tmp_path: Path) -> None:
    package = _write_nupkg(tmp_path / "demo.1.0.0.nupkg", {"images/icon.png": b"PNG"})
    with PackageArchiveReader(package) as reader, reader.get_stream("images/icon.png") as stream:
        assert stream.read() == b"PNG"


def test_get_stream_normalizes_lookup(tmp_path: Path) -> None:
    package = _write_nupkg(
        tmp_path / "demo.1.0.0.nupkg",
        {"images/Icon.png": b"PNG", "docs/read%20me.md": b"# readme"},
    )
    with PackageArchiveReader(package) as reader:
        with reader.get_stream("/images/icon.PNG") as stream:
            assert stream.read() == b"PNG"
        with reader.get_stream("images\\Icon.png") as stream:
            assert stream.read() == b"PNG"
        with reader.get_stream("docs/read me.md") as stream:
            assert stream.read() == b"# readme"


def test_get_stream_missing_entry_raises(tmp_path: Path) -> None:
    package = _write_nupkg(tmp_path / "demo.1.0.0.nupkg", {"images/icon.png": b"PNG"})
    with PackageArchiveReader(package) as reader:
        with pytest.raises(PackageArchiveError, match="not found"):
            reader.get_stream("images/missing.png")
        with pytest.raises(PackageArchiveError):
            reader.get_stream("")


def test_open_missing_or_corrupt_archive_raises(tmp_path: Path) -> None:
    with pytest.raises(PackageArchiveError, match="not found"):
        PackageArchiveReader(tmp_path / "missing.nupkg")
    corrupt = tmp_path / "corrupt.nupkg"
    corrupt.write_bytes(b"not a zip")
    with pytest.raises(PackageArchiveError):
        PackageArchiveReader(corrupt)


def test_nuspec_and_identity(tmp_path: Path) -> None:
    package = _write_nupkg(
        tmp_path / "demo.1.0.0.nupkg",
        {"Demo.Package.nuspec": _nuspec(), "lib/net8.0/Demo.dll": b"MZ", "images/icon.png": b"PNG"},
    )
    with PackageArchiveReader(package) as reader:
        assert reader.get_nuspec_file() == "Demo.Package.nuspec"
        assert reader.get_identity() == PackageIdentity("demo.package", "1.0.0")
        assert sorted(reader.get_files()) == ["Demo.Package.nuspec", "images/icon.png", "lib/net8.0/Demo.dll"]


def test_nuspec_lookup_requires_single_root_manifest(tmp_path: Path) -> None:
    package = _write_nupkg(tmp_path / "demo.1.0.0.nupkg", {"content/nested.nuspec": _nuspec()})
    with PackageArchiveReader(package) as reader:
        with pytest.raises(PackageArchiveError, match="no nuspec"):
            reader.get_nuspec_file()


def test_nuspec_reader_fields() -> None:
    reader = NuspecReader(_nuspec())
    assert reader.get_id() == "Demo.Package"
    assert reader.get_version() == "1.0.0"
    assert reader.get_icon() == "images/icon.png"
    assert reader.get_icon_url() == "https://example.com/icon.png"
    assert reader.get_description() == "Demo package"
    assert reader.get_authors() == ["alice", "bob"]
    metadata = reader.get_metadata()
    assert metadata["id"] == "Demo.Package"
    assert "dependencies" not in metadata


def test_nuspec_reader_without_namespace() -> None:
    reader = NuspecReader(_nuspec("Plain", "2.0.0", namespace=None))
    assert reader.get_identity() == PackageIdentity("Plain", "2.0.0")
    assert reader.get_authors() == ["alice", "bob"]


def test_nuspec_reader_rejects_invalid_documents() -> None:
    with pytest.raises(NuspecError):
        NuspecReader(b"<package><metadata>")
    with pytest.raises(NuspecError, match="no metadata"):
        NuspecReader(b"<package><files /></package>")
    with pytest.raises(NuspecError, match="package id"):
        NuspecReader(b"<package><metadata><version>1.0.0</version></metadata></package>").get_id()


def test_normalize_entry_path() -> None:
    assert normalize_entry_path("\\images\\icon.png") == "images/icon.png"
