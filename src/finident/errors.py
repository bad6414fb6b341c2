"""
Typed validation outcomes.

Expected failures (bad user input) are *values*, never exceptions: every public
entry point returns a `ValidationResult` (or a `Result[T]` for the low-level
primitives) carrying one of a closed set of `ErrorCode`s. Exceptions are kept for
programmer errors, e.g. a broken rule pack or registering into a frozen registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    INVALID_INPUT = "InvalidInput"
    INVALID_LENGTH = "InvalidLength"
    INVALID_FORMAT = "InvalidFormat"
    INVALID_CHECKSUM = "InvalidChecksum"
    INVALID_COUNTRY_CODE = "InvalidCountryCode"
    UNSUPPORTED_COUNTRY = "UnsupportedCountry"


# Default English messages; placeholders are filled from the result details.
_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.INVALID_INPUT: "input is empty or not text",
    ErrorCode.INVALID_LENGTH: "invalid length: expected {expected}, got {actual}",
    ErrorCode.INVALID_FORMAT: "invalid format",
    ErrorCode.INVALID_CHECKSUM: "checksum does not match",
    ErrorCode.INVALID_COUNTRY_CODE: "invalid country code {country!r}",
    ErrorCode.UNSUPPORTED_COUNTRY: "country {country!r} is not supported",
}


class RegistryError(ValueError):
    """Raised for misconfigured registries and rule packs (programmer errors)."""


def default_message(code: ErrorCode, details: Dict[str, Any]) -> str:
    template = _MESSAGES[code]
    try:
        return template.format(**details)
    except (KeyError, IndexError):
        # Not every caller supplies every placeholder; fall back to the bare label.
        return template.split(":")[0].split("{")[0].strip()


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one identifier.

    `error_code is None` means success. Results are truthy when valid so callers
    can write `if validate_iban(x): ...`.
    """
    error_code: Optional[ErrorCode] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.error_code is None

    def __bool__(self) -> bool:
        return self.is_valid

    @classmethod
    def success(cls) -> "ValidationResult":
        return _SUCCESS

    @classmethod
    def failure(
        cls, code: ErrorCode, message: Optional[str] = None, **details: Any
    ) -> "ValidationResult":
        return cls(
            error_code=code,
            message=message or default_message(code, details),
            details=details,
        )


_SUCCESS = ValidationResult()


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or the failing `ValidationResult` that prevented it."""
    value: Optional[T] = None
    error: Optional[ValidationResult] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def of(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, code: ErrorCode, message: Optional[str] = None, **details: Any) -> "Result[T]":
        return cls(error=ValidationResult.failure(code, message, **details))

    def result(self) -> ValidationResult:
        return self.error if self.error is not None else ValidationResult.success()
