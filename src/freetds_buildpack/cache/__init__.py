"""Version-keyed artifact cache APIs."""

from .keys import cache_file_name
from .store import ArtifactCache

__all__ = ["ArtifactCache", "cache_file_name"]
