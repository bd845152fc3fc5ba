from pathlib import Path

import pytest

from freetds_buildpack.errors import FetchError
from freetds_buildpack.fetch import UNPACK_LOG_NAME, fetch_archive

ARCHIVE_ROOT = "freetds-1.00.109"


def test_fetch_extracts_source_tree(tmp_path: Path, source_archive: Path) -> None:
    work_dir = tmp_path / "build"

    source = fetch_archive(source_archive.as_uri(), work_dir=work_dir)

    assert source == work_dir / ARCHIVE_ROOT
    assert (source / "configure").is_file()
    assert (source / "src" / "tsql.c").read_text(encoding="utf-8").startswith("int main")
    assert (source / "configure").stat().st_mode & 0o100


def test_fetch_moves_unpack_log_into_source_tree(tmp_path: Path, source_archive: Path) -> None:
    work_dir = tmp_path / "build"

    source = fetch_archive(source_archive.as_uri(), work_dir=work_dir)

    assert not (work_dir / UNPACK_LOG_NAME).exists()
    logged = (source / UNPACK_LOG_NAME).read_text(encoding="utf-8").splitlines()
    assert f"{ARCHIVE_ROOT}/configure" in logged
    assert f"{ARCHIVE_ROOT}/src/tsql.c" in logged


def test_fetch_does_not_keep_compressed_archive(tmp_path: Path, source_archive: Path) -> None:
    work_dir = tmp_path / "build"

    fetch_archive(source_archive.as_uri(), work_dir=work_dir)

    assert sorted(path.name for path in work_dir.iterdir()) == [ARCHIVE_ROOT]


def test_fetch_raises_on_missing_archive(tmp_path: Path) -> None:
    missing = tmp_path / "dist" / "freetds-0.0.0.tar.gz"

    with pytest.raises(FetchError) as excinfo:
        fetch_archive(missing.as_uri(), work_dir=tmp_path / "build")

    assert excinfo.value.code == "E_FETCH"
    assert excinfo.value.context["url"] == missing.as_uri()


def test_fetch_raises_on_corrupt_archive(tmp_path: Path) -> None:
    corrupt = tmp_path / "corrupt.tar.gz"
    corrupt.write_bytes(b"this is not gzip")

    with pytest.raises(FetchError) as excinfo:
        fetch_archive(corrupt.as_uri(), work_dir=tmp_path / "build")

    assert "extract" in str(excinfo.value)
    assert (tmp_path / "build" / UNPACK_LOG_NAME).exists()
