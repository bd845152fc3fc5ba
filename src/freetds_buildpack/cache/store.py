"""Version-keyed archive cache for installed FreeTDS trees."""

from __future__ import annotations

import os
import shutil
import tarfile
import tempfile
from pathlib import Path

from freetds_buildpack.cache.keys import cache_file_name
from freetds_buildpack.errors import CacheError


class ArtifactCache:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, version: str) -> Path:
        return self.root / cache_file_name(version)

    def save(self, install_dir: str | Path, *, version: str) -> Path:
        """Pack *install_dir* into the cache entry for *version*.

        Member names are relative to the install root. The archive is
        written beside the entry and renamed over it, so the entry is either
        the previous archive or the complete new one.
        """
        source = Path(install_dir)
        if not source.is_dir():
            raise CacheError(
                "Install directory to cache does not exist.",
                hint="Only cache a tree after a successful build and smoke test.",
                context={"operation": "cache_save", "path": str(source)},
            )
        target = self.path_for(version)
        fd, temp_name = tempfile.mkstemp(prefix=".freetds-", suffix=".tmp", dir=self.root)
        os.close(fd)
        temp_path = Path(temp_name)
        try:
            with tarfile.open(temp_path, "w:gz") as archive:
                archive.add(source, arcname=".")
            os.replace(temp_path, target)
        except (OSError, tarfile.TarError) as exc:
            raise CacheError(
                "Failed to write cache archive.",
                hint=str(exc),
                context={"operation": "cache_save", "path": str(target)},
            ) from exc
        finally:
            temp_path.unlink(missing_ok=True)
        return target

    def restore(self, cache_file: str | Path, destination: str | Path) -> Path:
        """Extract *cache_file* into *destination*, replacing its contents."""
        archive_path = Path(cache_file)
        target = Path(destination)
        if not archive_path.is_file():
            raise CacheError(
                "Cache archive does not exist.",
                hint="Rebuild with FREETDS_REBUILD=true to recreate the cache entry.",
                context={"operation": "cache_restore", "path": str(archive_path)},
            )
        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True)
        try:
            with tarfile.open(archive_path, "r:gz") as archive:
                archive.extractall(target, filter="tar")
        except (OSError, tarfile.TarError) as exc:
            raise CacheError(
                "Failed to restore cache archive.",
                hint="Rebuild with FREETDS_REBUILD=true to discard the suspect entry.",
                context={
                    "operation": "cache_restore",
                    "path": str(archive_path),
                    "destination": str(target),
                    "error": str(exc),
                },
            ) from exc
        return target
