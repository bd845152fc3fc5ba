"""Source archive retrieval."""

from __future__ import annotations

from .http import UNPACK_LOG_NAME, fetch_archive

__all__ = ["UNPACK_LOG_NAME", "fetch_archive"]
