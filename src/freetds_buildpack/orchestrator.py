"""End-to-end sequencing of one buildpack invocation."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from freetds_buildpack.builders import AutotoolsBuilder, Builder, BuildSpec, smoke_test
from freetds_buildpack.cache import ArtifactCache
from freetds_buildpack.config import BuildConfig
from freetds_buildpack.environment import ExportResult, export_environment, runtime_bundle
from freetds_buildpack.errors import BuildError, BuildpackError
from freetds_buildpack.fetch import fetch_archive
from freetds_buildpack.observability import StructuredLogger
from freetds_buildpack.paths import PathSet
from freetds_buildpack.policy import should_use_cache

Fetcher = Callable[..., Path]
SmokeTest = Callable[..., str]


@dataclass(frozen=True, slots=True)
class RunResult:
    ok: bool
    step: str
    cache_hit: bool = False
    error: BuildpackError | None = None
    export: ExportResult | None = None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


@dataclass(slots=True)
class _Status:
    exit_code: int = 1


@contextmanager
def run_banner(
    logger: StructuredLogger,
    *,
    config: BuildConfig,
    build_dir: Path,
    current_step: Callable[[], str],
) -> Iterator[_Status]:
    """Log the start banner, then the end banner with the exit status on the way out."""
    status = _Status()
    logger.log(
        operation="run_start",
        step=None,
        level="topic",
        message=f"FreeTDS buildpack: installing {config.archive_name}",
        extra={"version": config.version, "build_dir": str(build_dir)},
    )
    try:
        yield status
    finally:
        step = current_step()
        outcome = "completed" if status.exit_code == 0 else f"failed at `{step}`"
        logger.log(
            operation="run_end",
            step=step,
            level="topic" if status.exit_code == 0 else "error",
            message=f"FreeTDS buildpack {outcome} (exit status {status.exit_code})",
            extra={"exit_code": status.exit_code},
        )


def record_failure(logger: StructuredLogger, exc: BuildpackError, *, step: str) -> RunResult:
    exc.step = step
    logger.log(
        operation="step_failed",
        step=step,
        level="error",
        message=f"Step `{step}` failed: {exc}",
        extra=exc.to_dict(),
    )
    return RunResult(ok=False, step=step, error=exc)


def reject_invocation(
    logger: StructuredLogger,
    exc: BuildpackError,
    *,
    config: BuildConfig,
    build_dir: Path,
) -> RunResult:
    """Report an invocation whose directories were rejected before any step ran."""
    with run_banner(logger, config=config, build_dir=build_dir, current_step=lambda: "prepare") as status:
        result = record_failure(logger, exc, step="prepare")
        status.exit_code = result.exit_code
    return result


@dataclass(slots=True)
class Orchestrator:
    """Runs cache check, build, restore and export for one invocation.

    The first failing step ends the run. Nothing is retried, and the end
    banner is logged whichever way the run finishes.
    """

    paths: PathSet
    config: BuildConfig
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    inherited_env: Mapping[str, str] = field(default_factory=dict)
    fetcher: Fetcher = fetch_archive
    builder: Builder = field(default_factory=AutotoolsBuilder)
    smoke: SmokeTest = smoke_test
    cache: ArtifactCache | None = None
    _step: str = field(init=False, default="start", repr=False)

    def run(self) -> RunResult:
        with self._banner() as status:
            try:
                result = self._execute()
            except BuildpackError as exc:
                result = record_failure(self.logger, exc, step=self._step)
            status.exit_code = result.exit_code
        if result.ok:
            self.logger.to_json_lines(self.paths.run_log)
        return result

    def _execute(self) -> RunResult:
        self._enter("prepare", "Preparing build directories")
        self.paths.ensure()
        cache = self.cache if self.cache is not None else ArtifactCache(self.paths.cache_dir)

        self._enter("cache_policy", "Checking build cache")
        cache_hit = should_use_cache(self.paths.cache_file, force_rebuild=self.config.force_rebuild)
        if cache_hit:
            self._detail(f"Using cached FreeTDS {self.config.version}", cache_file=str(self.paths.cache_file))
        else:
            if self.config.force_rebuild:
                self._detail("Forced rebuild requested; cache entry discarded")
            self._build_and_cache(cache)

        self._enter("restore", f"Restoring FreeTDS into {self.paths.build_install_dir}")
        cache.restore(self.paths.cache_file, self.paths.build_install_dir)

        self._enter("export", "Exporting FreeTDS environment")
        exported = export_environment(self.paths, inherited=self.inherited_env)
        self._detail(f"Wrote {exported.profile_script}")
        self._detail(f"Wrote {exported.export_file}")
        return RunResult(ok=True, step="complete", cache_hit=cache_hit, export=exported)

    def _build_and_cache(self, cache: ArtifactCache) -> None:
        url = self.config.archive_url
        self._enter("fetch", f"Fetching {url}")
        source = self.fetcher(url, work_dir=self.paths.build_work_dir)

        prefix = self.paths.runtime_install_dir
        self._enter("build", f"Building {self.config.archive_name} into {prefix}")
        # the install prefix is replaced wholesale, never merged with an older build
        try:
            if prefix.exists():
                shutil.rmtree(prefix)
        except OSError as exc:
            raise BuildError(
                "Failed to clear the install prefix before building.",
                hint="Make sure the build user can write to the runtime install directory.",
                context={"operation": "build", "prefix": str(prefix), "error": str(exc)},
            ) from exc
        artifact = self.builder.build(
            BuildSpec(
                name=self.config.archive_name,
                source=source,
                prefix=prefix,
                tds_version=self.config.tds_version,
            )
        )
        self._detail(f"Build logs published to {artifact.log_dir}")

        self._enter("smoke_test", "Running tsql -C")
        resolved = runtime_bundle(self.paths).resolve(self.inherited_env)
        self.smoke(artifact.install_dir, env={**self.inherited_env, **resolved})

        self._enter("cache_save", f"Caching FreeTDS {self.config.version}")
        saved = cache.save(artifact.install_dir, version=self.config.version)
        self._detail(f"Cached build at {saved}")

    def _banner(self) -> AbstractContextManager[_Status]:
        return run_banner(
            self.logger,
            config=self.config,
            build_dir=self.paths.build_dir,
            current_step=lambda: self._step,
        )

    def _enter(self, step: str, message: str) -> None:
        self._step = step
        self.logger.log(operation="step_start", step=step, level="topic", message=message)

    def _detail(self, message: str, **extra: str) -> None:
        self.logger.log(
            operation="detail",
            step=self._step,
            message=message,
            extra=dict(extra) if extra else None,
        )
