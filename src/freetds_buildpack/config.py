"""Build configuration resolved from env-dir overrides and built-in defaults."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_VERSION = "1.00.109"
DEFAULT_TDS_VERSION = "7.3"
# Rebuilding on every deploy works around a linking issue seen with cached
# artifacts. Set FREETDS_REBUILD=false in the env dir to use the cache.
DEFAULT_FORCE_REBUILD = True

STABLE_RELEASES_URL = "https://www.freetds.org/files/stable"

VERSION_VAR = "FREETDS_VERSION"
ARCHIVE_NAME_VAR = "FREETDS_ARCHIVE_NAME"
TDS_VERSION_VAR = "TDS_VERSION"
REBUILD_VAR = "FREETDS_REBUILD"

RECOGNIZED_OVERRIDES: tuple[str, ...] = (
    VERSION_VAR,
    ARCHIVE_NAME_VAR,
    TDS_VERSION_VAR,
    REBUILD_VAR,
)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


@dataclass(frozen=True, slots=True)
class BuildConfig:
    version: str
    archive_name: str
    tds_version: str
    force_rebuild: bool

    @property
    def archive_url(self) -> str:
        return f"{STABLE_RELEASES_URL}/{self.archive_name}.tar.gz"

    @property
    def cache_key(self) -> str:
        return self.version


def load_overrides(env_dir: str | Path | None, names: Iterable[str]) -> dict[str, str]:
    """Read ``env_dir/<name>`` for each recognized name that has a file.

    A missing directory yields no overrides. Values are taken verbatim apart
    from the trailing newline most editors add.
    """
    if env_dir is None:
        return {}
    root = Path(env_dir)
    if not root.is_dir():
        return {}
    overrides: dict[str, str] = {}
    for name in names:
        candidate = root / name
        if candidate.is_file():
            overrides[name] = candidate.read_text(encoding="utf-8").rstrip("\r\n")
    return overrides


def parse_flag(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def resolve_config(overrides: Mapping[str, str]) -> BuildConfig:
    version = overrides.get(VERSION_VAR, DEFAULT_VERSION)
    archive_name = overrides.get(ARCHIVE_NAME_VAR, f"freetds-{version}")
    tds_version = overrides.get(TDS_VERSION_VAR, DEFAULT_TDS_VERSION)
    rebuild_raw = overrides.get(REBUILD_VAR)
    force_rebuild = DEFAULT_FORCE_REBUILD if rebuild_raw is None else parse_flag(rebuild_raw)
    return BuildConfig(
        version=version,
        archive_name=archive_name,
        tds_version=tds_version,
        force_rebuild=force_rebuild,
    )


def load_build_config(env_dir: str | Path | None) -> BuildConfig:
    return resolve_config(load_overrides(env_dir, RECOGNIZED_OVERRIDES))
