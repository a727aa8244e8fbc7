"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across the build and packaging surfaces."""

    CONFIGURATION = "E_CONFIGURATION"
    COMPILER = "E_COMPILER"
    PROCESS = "E_PROCESS"
    PROCESS_START = "E_PROCESS_START"
    ARCHIVE = "E_ARCHIVE"


class BundleError(Exception):
    """Failure raised by any bundling, install or packaging step.

    Subclasses pin the error family: bad build options, a failed compiler
    batch, a package manager or zip tool that could not start or exited
    non-zero, and archive writes. ``context`` holds string details such as the
    command line, working directory or archive path, and ``to_dict()`` renders
    the whole error for machine consumers.
    """

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ConfigurationError(BundleError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CONFIGURATION, hint=hint, context=context)


class CompilerError(BundleError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.COMPILER, hint=hint, context=context)


class ProcessStartError(BundleError):
    """The external process could not be started at all."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.PROCESS_START, hint=hint, context=context)


class SpawnError(BundleError):
    """The external process ran and exited non-zero.

    Both captured streams are kept verbatim so callers can present the full
    tool output.
    """

    stdout: str
    stderr: str
    returncode: int

    def __init__(
        self,
        message: str,
        *,
        stdout: str,
        stderr: str,
        returncode: int,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.PROCESS, hint=hint, context=context)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode

    def __str__(self) -> str:
        rendered = super().__str__()
        if self.stderr:
            return f"{rendered}\n{self.stderr}"
        return rendered

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["stdout"] = self.stdout
        payload["stderr"] = self.stderr
        payload["returncode"] = self.returncode
        return payload


class ArchiveError(BundleError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.ARCHIVE, hint=hint, context=context)


__all__ = [
    "ArchiveError",
    "BundleError",
    "CompilerError",
    "ConfigurationError",
    "ErrorCode",
    "ProcessStartError",
    "SpawnError",
]
