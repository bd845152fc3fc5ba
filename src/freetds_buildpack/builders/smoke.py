"""Post-install smoke test gating the artifact cache."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from pathlib import Path

from freetds_buildpack.errors import SmokeTestError

SMOKE_TEST_BINARY = Path("bin") / "tsql"
SMOKE_TEST_ARGS: tuple[str, ...] = ("-C",)


def smoke_test(install_dir: str | Path, *, env: Mapping[str, str] | None = None) -> str:
    """Run ``tsql -C`` from *install_dir* and return its compile-time settings output."""
    binary = Path(install_dir) / SMOKE_TEST_BINARY
    if not binary.is_file():
        raise SmokeTestError(
            "Installed tsql binary is missing.",
            hint="Inspect the make logs in the install tree.",
            context={"operation": "smoke_test", "binary": str(binary)},
        )
    command = [str(binary), *SMOKE_TEST_ARGS]
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            env=dict(env) if env is not None else None,
            check=False,
        )
    except OSError as exc:
        raise SmokeTestError(
            "Installed tsql binary could not be executed.",
            hint=str(exc),
            context={"operation": "smoke_test", "binary": str(binary)},
        ) from exc
    if result.returncode != 0:
        raise SmokeTestError(
            "Installed tsql binary failed to run.",
            hint="The artifact was not cached. Inspect linker settings and build logs.",
            context={
                "operation": "smoke_test",
                "command": " ".join(command),
                "returncode": str(result.returncode),
                "stderr": result.stderr[:2000] if result.stderr else "",
            },
        )
    return result.stdout
