"""Environment bundles for the build-time and run-time FreeTDS locations.

Both bundles come from one template so they share variable names and
relative suffixes; only the base install path differs. Path-valued entries
prepend their segment to whatever value the variable already had, or to a
conventional system default when it had none.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from freetds_buildpack.errors import ExportError
from freetds_buildpack.paths import PathSet


@dataclass(frozen=True, slots=True)
class EnvVar:
    name: str
    suffix: str = ""
    fallback: str | None = None

    @property
    def prepends(self) -> bool:
        return self.fallback is not None


ENV_TEMPLATE: tuple[EnvVar, ...] = (
    EnvVar("PATH", "bin", "/usr/local/bin:/usr/bin:/bin"),
    EnvVar("LD_LIBRARY_PATH", "lib", "/usr/local/lib"),
    EnvVar("LD_RUN_PATH", "lib", "/usr/local/lib"),
    EnvVar("LIBRARY_PATH", "lib", "/usr/local/lib"),
    EnvVar("FREETDS_DIR"),
    # older tooling still looks the install root up under this name
    EnvVar("SYBASE"),
)


@dataclass(frozen=True, slots=True)
class EnvironmentBundle:
    base: PurePosixPath
    template: tuple[EnvVar, ...] = ENV_TEMPLATE

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(var.name for var in self.template)

    def segment(self, var: EnvVar) -> str:
        return str(self.base / var.suffix) if var.suffix else str(self.base)

    def segments(self) -> dict[str, str]:
        return {var.name: self.segment(var) for var in self.template}

    def resolve(self, inherited: Mapping[str, str]) -> dict[str, str]:
        """Concrete values layered over *inherited*, in template order."""
        values: dict[str, str] = {}
        for var in self.template:
            segment = self.segment(var)
            if var.prepends:
                previous = inherited.get(var.name) or var.fallback
                values[var.name] = f"{segment}:{previous}"
            else:
                values[var.name] = segment
        return values

    def render_profile_script(self) -> str:
        """POSIX shell exports evaluated each time the process starts."""
        lines = ["# Generated by freetds-buildpack; overwritten on every build."]
        for var in self.template:
            segment = self.segment(var)
            if var.prepends:
                lines.append(f'export {var.name}="{segment}:${{{var.name}:-{var.fallback}}}"')
            else:
                lines.append(f'export {var.name}="{segment}"')
        return "\n".join(lines) + "\n"

    def render_handoff(self, inherited: Mapping[str, str]) -> str:
        resolved = self.resolve(inherited)
        return "".join(f"{name}={value}\n" for name, value in resolved.items())


@dataclass(frozen=True, slots=True)
class ExportResult:
    profile_script: Path
    export_file: Path
    runtime: EnvironmentBundle
    build: EnvironmentBundle


def bundle_for(base: str | Path) -> EnvironmentBundle:
    return EnvironmentBundle(base=PurePosixPath(base))


def runtime_bundle(paths: PathSet) -> EnvironmentBundle:
    return bundle_for(paths.runtime_install_dir)


def build_bundle(paths: PathSet) -> EnvironmentBundle:
    return bundle_for(paths.build_install_dir)


def export_environment(paths: PathSet, *, inherited: Mapping[str, str]) -> ExportResult:
    """Write the runtime profile script and the build-stage handoff file.

    Both files are rewritten from scratch, so repeated runs produce the same
    content.
    """
    runtime = runtime_bundle(paths)
    build = build_bundle(paths)
    _write(paths.profile_script, runtime.render_profile_script())
    _write(paths.export_file, build.render_handoff(inherited))
    return ExportResult(
        profile_script=paths.profile_script,
        export_file=paths.export_file,
        runtime=runtime,
        build=build,
    )


def _write(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ExportError(
            "Failed to write environment file.",
            hint=str(exc),
            context={"operation": "export", "path": str(path)},
        ) from exc
