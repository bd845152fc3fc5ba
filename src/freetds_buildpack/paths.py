"""Filesystem layout for one buildpack invocation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from freetds_buildpack.cache.keys import cache_file_name
from freetds_buildpack.errors import ValidationError

RUNTIME_INSTALL_DIR = Path("/app/freetds")
INSTALL_DIR_NAME = "freetds"
PROFILE_SCRIPT_NAME = "freetds.sh"
EXPORT_FILE_NAME = "export"
BUILD_LOG_DIR_NAME = "build-logs"


@dataclass(frozen=True, slots=True)
class PathSet:
    """Build-time and run-time locations.

    ``runtime_install_dir`` is the prefix compiled into the binaries; the
    artifact is copied from there into ``build_install_dir``, which becomes
    ``runtime_install_dir`` once the slug is deployed.
    """

    build_dir: Path
    cache_dir: Path
    env_dir: Path
    buildpack_dir: Path
    cache_file: Path
    runtime_install_dir: Path = RUNTIME_INSTALL_DIR

    def __post_init__(self) -> None:
        if self.build_install_dir == self.runtime_install_dir:
            raise ValidationError(
                "Build and runtime install directories must differ.",
                hint="Run the buildpack from a build directory other than the runtime root.",
                context={
                    "build_install_dir": str(self.build_install_dir),
                    "runtime_install_dir": str(self.runtime_install_dir),
                },
            )

    @classmethod
    def create(
        cls,
        *,
        build_dir: str | Path,
        cache_dir: str | Path,
        env_dir: str | Path,
        buildpack_dir: str | Path,
        version: str,
        runtime_install_dir: str | Path = RUNTIME_INSTALL_DIR,
    ) -> PathSet:
        cache_root = Path(cache_dir)
        return cls(
            build_dir=Path(build_dir),
            cache_dir=cache_root,
            env_dir=Path(env_dir),
            buildpack_dir=Path(buildpack_dir),
            cache_file=cache_root / cache_file_name(version),
            runtime_install_dir=Path(runtime_install_dir),
        )

    @property
    def build_work_dir(self) -> Path:
        return self.build_dir

    @property
    def build_install_dir(self) -> Path:
        return self.build_dir / INSTALL_DIR_NAME

    @property
    def profile_script(self) -> Path:
        return self.build_dir / ".profile.d" / PROFILE_SCRIPT_NAME

    @property
    def export_file(self) -> Path:
        return self.buildpack_dir / EXPORT_FILE_NAME

    @property
    def run_log(self) -> Path:
        return self.build_install_dir / BUILD_LOG_DIR_NAME / "run.jsonl"

    def ensure(self) -> None:
        """Create the working directories; safe to call repeatedly."""
        for directory in (self.build_dir, self.cache_dir, self.profile_script.parent):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ValidationError(
                    "Failed to create a buildpack directory.",
                    hint="Check that the build and cache directories are writable.",
                    context={"operation": "prepare", "path": str(directory), "error": str(exc)},
                ) from exc
