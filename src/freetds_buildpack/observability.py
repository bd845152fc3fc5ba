"""Structured logging and progress output helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

TOPIC_PREFIX = "-----> "
DETAIL_PREFIX = "       "


@dataclass(slots=True)
class StructuredLogger:
    """Collects log records and optionally echoes them as build output.

    Records at ``topic`` level are printed with the ``----->`` arrow the
    platform uses for build steps; everything else is indented beneath.
    """

    stream: TextIO | None = None
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        step: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        timestamp = datetime.now(UTC).isoformat(timespec="seconds")
        record: dict[str, Any] = {
            "timestamp": timestamp,
            "level": level,
            "operation": operation,
            "step": step,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        if self.stream is not None:
            prefix = TOPIC_PREFIX if level == "topic" else DETAIL_PREFIX
            self.stream.write(f"{prefix}[{timestamp}] {message}\n")
            self.stream.flush()

    def records_for_step(self, step: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("step") == step]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
