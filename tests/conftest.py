"""Shared test fixtures."""

from __future__ import annotations

import io
import subprocess
import tarfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

ARCHIVE_ROOT = "freetds-1.00.109"

TSQL_SCRIPT = "#!/bin/sh\necho 'Compile-time settings (established with the \"configure\" script)'\n"


@dataclass
class FakeToolchain:
    """Stands in for ``subprocess.run`` inside the autotools builder.

    ``make install`` lays out a small FreeTDS-like tree under the configured
    prefix. ``fail_on`` names a step (configure, compile, install, clean)
    that exits non-zero instead.
    """

    fail_on: str | None = None
    calls: list[tuple[str, ...]] = field(default_factory=list)
    prefix: Path | None = None

    def __call__(self, command: Sequence[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        argv = tuple(command)
        self.calls.append(argv)
        step = _step_for(argv)
        stdout = kwargs["stdout"]
        stderr = kwargs["stderr"]
        stdout.write(f"running {step}\n")
        if step == self.fail_on:
            stderr.write(f"{step} exploded\n")
            return subprocess.CompletedProcess(argv, 2)
        if step == "configure":
            self.prefix = Path(next(a for a in argv if a.startswith("--prefix=")).split("=", 1)[1])
        if step == "install":
            assert self.prefix is not None
            _install_tree(self.prefix)
        return subprocess.CompletedProcess(argv, 0)

    @property
    def steps(self) -> list[str]:
        return [_step_for(call) for call in self.calls]


@pytest.fixture
def fake_toolchain(monkeypatch: pytest.MonkeyPatch) -> FakeToolchain:
    toolchain = FakeToolchain()
    monkeypatch.setattr("freetds_buildpack.builders.autotools.subprocess.run", toolchain)
    return toolchain


@pytest.fixture
def source_archive(tmp_path: Path) -> Path:
    """A gzip tarball shaped like an upstream FreeTDS release."""
    archive_path = tmp_path / "dist" / f"{ARCHIVE_ROOT}.tar.gz"
    archive_path.parent.mkdir(parents=True)
    with tarfile.open(archive_path, "w:gz") as archive:
        _add_dir(archive, ARCHIVE_ROOT)
        _add_file(archive, f"{ARCHIVE_ROOT}/configure", b"#!/bin/sh\nexit 0\n", mode=0o755)
        _add_file(archive, f"{ARCHIVE_ROOT}/Makefile.in", b"all:\n")
        _add_dir(archive, f"{ARCHIVE_ROOT}/src")
        _add_file(archive, f"{ARCHIVE_ROOT}/src/tsql.c", b"int main(void) { return 0; }\n")
    return archive_path


def _step_for(argv: tuple[str, ...]) -> str:
    if argv[0] == "./configure":
        return "configure"
    if argv[1:] == ("install",):
        return "install"
    if argv[1:] == ("clean",):
        return "clean"
    return "compile"


def _install_tree(prefix: Path) -> None:
    (prefix / "bin").mkdir(parents=True, exist_ok=True)
    (prefix / "lib").mkdir(parents=True, exist_ok=True)
    (prefix / "etc").mkdir(parents=True, exist_ok=True)
    tsql = prefix / "bin" / "tsql"
    tsql.write_text(TSQL_SCRIPT, encoding="utf-8")
    tsql.chmod(0o755)
    library = prefix / "lib" / "libsybdb.so.5.1.0"
    library.write_bytes(b"\x7fELF fake library")
    library.chmod(0o755)
    (prefix / "lib" / "libsybdb.so").symlink_to("libsybdb.so.5.1.0")
    (prefix / "etc" / "freetds.conf").write_text("[global]\n", encoding="utf-8")
    (prefix / "etc" / "freetds.conf").chmod(0o644)


def _add_dir(archive: tarfile.TarFile, name: str) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.DIRTYPE
    info.mode = 0o755
    archive.addfile(info)


def _add_file(archive: tarfile.TarFile, name: str, payload: bytes, *, mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(payload)
    info.mode = mode
    archive.addfile(info, io.BytesIO(payload))
