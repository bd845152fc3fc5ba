"""Cache reuse policy."""

from __future__ import annotations

from pathlib import Path

from freetds_buildpack.errors import CacheError


def should_use_cache(cache_file: str | Path, *, force_rebuild: bool) -> bool:
    """Return whether the cached artifact at *cache_file* may be restored.

    A forced rebuild deletes the existing entry first, so later existence
    checks cannot short-circuit the fresh build.
    """
    path = Path(cache_file)
    if force_rebuild:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise CacheError(
                "Failed to discard the cached build before rebuilding.",
                hint="Remove the entry from the cache directory by hand.",
                context={"operation": "cache_policy", "path": str(path), "error": str(exc)},
            ) from exc
        return False
    return path.is_file()
