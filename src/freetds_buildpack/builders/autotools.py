"""Autotools (configure/make) builder for FreeTDS."""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from typing import IO

from freetds_buildpack.builders.base import BuildArtifact, BuildSpec
from freetds_buildpack.builders.materialize import discard_source_tree, publish_build_logs
from freetds_buildpack.errors import BuildError
from freetds_buildpack.fetch import UNPACK_LOG_NAME

DEFAULT_CONFIGURE_FLAGS: tuple[str, ...] = (
    "--disable-odbc",
    "--disable-debug",
    "--disable-krb5",
)

CONFIGURE_RECORD_NAME = "configure-invocation.sh"
CONFIGURE_STDOUT = "configure.stdout.log"
CONFIGURE_STDERR = "configure.stderr.log"
MAKE_STDOUT = "make.stdout.log"
MAKE_STDERR = "make.stderr.log"


@dataclass(slots=True)
class AutotoolsBuilder:
    make: str = "make"

    def configure_command(self, spec: BuildSpec) -> tuple[str, ...]:
        return (
            "./configure",
            f"--prefix={spec.prefix}",
            *DEFAULT_CONFIGURE_FLAGS,
            *spec.flags,
            f"--with-tdsver={spec.tds_version}",
        )

    def build(self, spec: BuildSpec) -> BuildArtifact:
        source = spec.source
        configure = self.configure_command(spec)

        record = source / CONFIGURE_RECORD_NAME
        try:
            record.write_text(f"#!/bin/sh\n{shlex.join(configure)}\n", encoding="utf-8")
        except OSError as exc:
            raise BuildError(
                f"{spec.name} configure invocation could not be recorded.",
                context={"operation": "configure", "record": str(record), "error": str(exc)},
            ) from exc

        configure_out = source / CONFIGURE_STDOUT
        configure_err = source / CONFIGURE_STDERR
        make_out = source / MAKE_STDOUT
        make_err = source / MAKE_STDERR

        with configure_out.open("w", encoding="utf-8") as out, configure_err.open(
            "w", encoding="utf-8"
        ) as err:
            self._run_step("configure", configure, spec=spec, stdout=out, stderr=err)

        # compile, install and clean succeed or fail as one unit
        with make_out.open("w", encoding="utf-8") as out, make_err.open(
            "w", encoding="utf-8"
        ) as err:
            for step, command in (
                ("compile", (self.make,)),
                ("install", (self.make, "install")),
                ("clean", (self.make, "clean")),
            ):
                self._run_step(step, command, spec=spec, stdout=out, stderr=err)

        log_dir, logs = publish_build_logs(
            (
                record,
                configure_out,
                configure_err,
                make_out,
                make_err,
                source / UNPACK_LOG_NAME,
            ),
            install_dir=spec.prefix,
        )
        discard_source_tree(source)

        return BuildArtifact(
            builder="autotools",
            install_dir=spec.prefix,
            log_dir=log_dir,
            configure_record=log_dir / CONFIGURE_RECORD_NAME,
            logs=logs,
        )

    def _run_step(
        self,
        step: str,
        command: tuple[str, ...],
        *,
        spec: BuildSpec,
        stdout: IO[str],
        stderr: IO[str],
    ) -> None:
        try:
            result = subprocess.run(
                command,
                cwd=spec.source,
                stdout=stdout,
                stderr=stderr,
                env=dict(spec.env) if spec.env else None,
                check=False,
            )
        except OSError as exc:
            raise BuildError(
                f"{spec.name} {step} could not be started.",
                hint=str(exc),
                context={"operation": step, "command": shlex.join(command)},
            ) from exc
        if result.returncode != 0:
            raise BuildError(
                f"{spec.name} {step} failed.",
                hint=f"Inspect the {step} logs in {spec.source}.",
                context={
                    "operation": step,
                    "returncode": str(result.returncode),
                    "command": shlex.join(command),
                    "source": str(spec.source),
                },
            )
