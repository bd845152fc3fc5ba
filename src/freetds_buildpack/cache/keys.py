"""Cache entry naming."""

from __future__ import annotations


def cache_file_name(version: str) -> str:
    return f"freetds-{version}.tar.gz"
