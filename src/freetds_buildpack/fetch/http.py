"""Streaming HTTP fetch and extraction of source archives."""

from __future__ import annotations

import shutil
import tarfile
from pathlib import Path, PurePosixPath
from urllib.error import URLError
from urllib.request import urlopen

from freetds_buildpack.errors import FetchError

UNPACK_LOG_NAME = "unpack.log"


def fetch_archive(url: str, *, work_dir: str | Path) -> Path:
    """Download *url* and extract it into *work_dir* in a single pass.

    The gzip tar stream is read straight from the response, with no copy of
    the compressed bytes on disk. Member names go to ``unpack.log``, which
    ends up inside the extracted source tree. Partial extraction is left in
    place on failure.
    """
    root = Path(work_dir)
    root.mkdir(parents=True, exist_ok=True)
    log_path = root / UNPACK_LOG_NAME
    top_level: list[str] = []

    try:
        with urlopen(url) as response, log_path.open("w", encoding="utf-8") as log:  # noqa: S310
            with tarfile.open(fileobj=response, mode="r|gz") as archive:
                for member in archive:
                    log.write(f"{member.name}\n")
                    head = PurePosixPath(member.name).parts[0] if member.name else ""
                    if head and head != "." and head not in top_level:
                        top_level.append(head)
                    archive.extract(member, root, filter="data")
    except URLError as exc:
        raise FetchError(
            "Failed to download source archive.",
            hint="Check the archive name and that the release server is reachable.",
            context={"operation": "fetch", "url": url, "error": str(exc.reason)},
        ) from exc
    except (OSError, tarfile.TarError) as exc:
        raise FetchError(
            "Failed to extract source archive.",
            hint=f"Inspect {log_path} and the partially extracted tree.",
            context={"operation": "fetch", "url": url, "error": str(exc)},
        ) from exc

    if len(top_level) != 1 or not (root / top_level[0]).is_dir():
        raise FetchError(
            "Source archive must contain exactly one top-level directory.",
            hint=f"Inspect {log_path} for the archive layout.",
            context={"operation": "fetch", "url": url, "roots": ",".join(top_level)},
        )

    source_tree = root / top_level[0]
    shutil.move(str(log_path), source_tree / UNPACK_LOG_NAME)
    return source_tree
