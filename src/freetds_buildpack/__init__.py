"""Public package entrypoint for the FreeTDS buildpack."""

from .cache import ArtifactCache
from .config import BuildConfig, load_build_config, load_overrides, resolve_config
from .environment import EnvironmentBundle, ExportResult, export_environment
from .errors import (
    BuildError,
    BuildpackError,
    CacheError,
    ErrorCode,
    ExportError,
    FetchError,
    SmokeTestError,
    ValidationError,
)
from .observability import StructuredLogger
from .orchestrator import Orchestrator, RunResult
from .paths import PathSet
from .policy import should_use_cache

__all__ = [
    "ArtifactCache",
    "BuildConfig",
    "BuildError",
    "BuildpackError",
    "CacheError",
    "EnvironmentBundle",
    "ErrorCode",
    "ExportError",
    "ExportResult",
    "FetchError",
    "Orchestrator",
    "PathSet",
    "RunResult",
    "SmokeTestError",
    "StructuredLogger",
    "ValidationError",
    "export_environment",
    "load_build_config",
    "load_overrides",
    "resolve_config",
    "should_use_cache",
]
