"""Typed interfaces for native builders."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True, slots=True)
class BuildSpec:
    name: str
    source: Path
    prefix: Path
    tds_version: str
    flags: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuildArtifact:
    builder: str
    install_dir: Path
    log_dir: Path
    configure_record: Path
    logs: tuple[Path, ...] = ()


class Builder(Protocol):
    def build(self, spec: BuildSpec) -> BuildArtifact:
        """Configure, compile and install *spec.source* under *spec.prefix*."""
