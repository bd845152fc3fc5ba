"""Helpers that finalize an installed tree after a native build."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from freetds_buildpack.errors import BuildError
from freetds_buildpack.paths import BUILD_LOG_DIR_NAME


def publish_build_logs(files: Iterable[Path], *, install_dir: Path) -> tuple[Path, tuple[Path, ...]]:
    """Copy build records into ``<install_dir>/build-logs`` and return their new paths."""
    log_dir = install_dir / BUILD_LOG_DIR_NAME
    published: list[Path] = []
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        for path in files:
            if not path.exists():
                continue
            destination = log_dir / path.name
            shutil.copy2(path, destination)
            published.append(destination)
    except OSError as exc:
        raise BuildError(
            "Failed to publish build logs into the install tree.",
            context={"operation": "publish_logs", "log_dir": str(log_dir), "error": str(exc)},
        ) from exc
    return log_dir, tuple(published)


def discard_source_tree(source: Path) -> None:
    try:
        if source.exists():
            shutil.rmtree(source)
    except OSError as exc:
        raise BuildError(
            "Failed to remove the source tree after building.",
            context={"operation": "cleanup", "source": str(source), "error": str(exc)},
        ) from exc
