"""Typed buildpack error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import ClassVar


class ErrorCode(StrEnum):
    """Stable error identifiers used in logs and run results."""

    VALIDATION = "E_VALIDATION"
    FETCH = "E_FETCH"
    BUILD = "E_BUILD"
    SMOKE_TEST = "E_SMOKE_TEST"
    CACHE = "E_CACHE"
    EXPORT = "E_EXPORT"


class BuildpackError(Exception):
    """Base error for one failed buildpack step.

    Each subclass fixes its ``ErrorCode``. ``step`` stays ``None`` until the
    orchestrator records which step raised the error.
    """

    default_code: ClassVar[ErrorCode | None] = None

    code: str
    hint: str | None
    context: Mapping[str, str]
    step: str | None

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
        step: str | None = None,
    ) -> None:
        resolved = code or self.default_code
        if resolved is None:
            raise TypeError(f"{type(self).__name__} requires an error code")
        super().__init__(message)
        self.code = resolved.value
        self.hint = hint
        self.context = dict(context or {})
        self.step = step

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""

    def __str__(self) -> str:
        lines = [self.message]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        lines.extend(f"  {key}: {value}" for key, value in self.context.items() if value)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        if self.step is not None:
            payload["step"] = self.step
        return payload


class ValidationError(BuildpackError):
    default_code = ErrorCode.VALIDATION


class FetchError(BuildpackError):
    default_code = ErrorCode.FETCH


class BuildError(BuildpackError):
    default_code = ErrorCode.BUILD


class SmokeTestError(BuildpackError):
    default_code = ErrorCode.SMOKE_TEST


class CacheError(BuildpackError):
    default_code = ErrorCode.CACHE


class ExportError(BuildpackError):
    default_code = ErrorCode.EXPORT


__all__ = [
    "BuildError",
    "BuildpackError",
    "CacheError",
    "ErrorCode",
    "ExportError",
    "FetchError",
    "SmokeTestError",
    "ValidationError",
]
