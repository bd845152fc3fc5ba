"""Command-line entrypoint invoked by the platform's compile hook.

Usage:
    freetds-buildpack BUILD_DIR CACHE_DIR ENV_DIR --buildpack-dir DIR
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from freetds_buildpack.config import load_build_config
from freetds_buildpack.errors import BuildpackError
from freetds_buildpack.observability import StructuredLogger
from freetds_buildpack.orchestrator import Orchestrator, reject_invocation
from freetds_buildpack.paths import PathSet


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="freetds-buildpack",
        description="Compile or restore FreeTDS and export its environment.",
    )
    parser.add_argument("build_dir", type=Path, help="Application build directory")
    parser.add_argument("cache_dir", type=Path, help="Directory persisted between builds")
    parser.add_argument("env_dir", type=Path, help="Directory of per-variable override files")
    parser.add_argument(
        "--buildpack-dir",
        type=Path,
        required=True,
        help="Buildpack root that receives the `export` handoff file",
    )
    parser.add_argument(
        "--log-json",
        type=Path,
        default=None,
        help="Also write structured run records to this JSON-lines file",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_build_config(args.env_dir)
    logger = StructuredLogger(stream=sys.stdout)
    try:
        paths = PathSet.create(
            build_dir=args.build_dir.resolve(),
            cache_dir=args.cache_dir.resolve(),
            env_dir=args.env_dir.resolve(),
            buildpack_dir=args.buildpack_dir.resolve(),
            version=config.version,
        )
    except BuildpackError as exc:
        print(f"error: {exc}", file=sys.stderr)
        result = reject_invocation(logger, exc, config=config, build_dir=args.build_dir)
    else:
        orchestrator = Orchestrator(
            paths=paths,
            config=config,
            logger=logger,
            inherited_env=dict(os.environ),
        )
        result = orchestrator.run()
    if args.log_json is not None:
        logger.to_json_lines(args.log_json)
    return result.exit_code
