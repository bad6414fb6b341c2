"""
Generic identifier validation.

Order of checks (first failure wins):

  1) raw input      -> text no longer than the configured cap
  2) canonicalize   -> InvalidInput / InvalidFormat
  3) country prefix -> InvalidCountryCode (when the layout declares one)
  4) length         -> InvalidLength (selects the layout variant when several exist)
  5) field classes  -> InvalidFormat naming the offending field
  6) checksum       -> InvalidChecksum
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Optional, Sequence

from ..checksum.canonical import CanonicalText, canonicalize
from ..errors import ErrorCode, Result, ValidationResult
from .descriptor import StructuralDescriptor
from .specs import ChecksumSpec, run_checksum

DEFAULT_MAX_INPUT_LENGTH = 64


@dataclass(frozen=True)
class Outcome:
    """Validation result plus what the parser needs on success."""
    result: ValidationResult
    text: Optional[CanonicalText] = None
    descriptor: Optional[StructuralDescriptor] = None


def _fail(code: ErrorCode, message: Optional[str] = None, **details) -> Outcome:
    return Outcome(ValidationResult.failure(code, message, **details))


class IdentifierValidator:
    """
    Runs the check sequence for one layout (or a set of length variants) and
    one checksum spec. Stateless apart from the input-length cap.
    """

    def __init__(self, max_input_length: int = DEFAULT_MAX_INPUT_LENGTH) -> None:
        self.max_input_length = max_input_length

    def validate(
        self,
        raw: Optional[str],
        layouts: Sequence[StructuralDescriptor],
        checksum: ChecksumSpec,
        strip_set: AbstractSet[str] = frozenset(),
    ) -> ValidationResult:
        return self.check(raw, layouts, checksum, strip_set).result

    def canonical(
        self, raw: Optional[str], strip_set: AbstractSet[str] = frozenset()
    ) -> Result[CanonicalText]:
        """Steps 1 and 2 only: input cap, then canonicalization."""
        if raw is None or not isinstance(raw, str):
            return Result.fail(ErrorCode.INVALID_INPUT)
        if len(raw) > self.max_input_length:
            return Result.fail(
                ErrorCode.INVALID_LENGTH,
                f"input longer than {self.max_input_length} characters",
                max=self.max_input_length,
                actual=len(raw),
            )
        return canonicalize(raw, strip_set)

    def check(
        self,
        raw: Optional[str],
        layouts: Sequence[StructuralDescriptor],
        checksum: ChecksumSpec,
        strip_set: AbstractSet[str] = frozenset(),
    ) -> Outcome:
        canon = self.canonical(raw, strip_set)
        if not canon.ok:
            return Outcome(canon.error)
        text = canon.value

        descriptor = self._select(text, layouts)
        if isinstance(descriptor, Outcome):
            return descriptor

        for f in descriptor.fields:
            part = descriptor.slice(text, f.name)
            if not f.char_class.matches(part):
                return _fail(
                    ErrorCode.INVALID_FORMAT,
                    f"field {f.name!r} has invalid characters",
                    field=f.name,
                )
            if f.literal is not None and part != f.literal:
                return _fail(
                    ErrorCode.INVALID_FORMAT,
                    f"field {f.name!r} must be {f.literal!r}",
                    field=f.name,
                )

        if not run_checksum(checksum, text, descriptor):
            return _fail(ErrorCode.INVALID_CHECKSUM)
        return Outcome(ValidationResult.success(), text, descriptor)

    # -- Layout selection ---------------------------------------------------------------------

    def _select(self, text: str, layouts: Sequence[StructuralDescriptor]):
        """Return the matching layout, or a failing Outcome."""
        if not layouts:
            raise ValueError("at least one layout is required")

        # All variants share the same country prefix (enforced at registration).
        prefix = layouts[0].country_prefix
        if prefix is not None:
            start, end, literal = prefix
            if len(text) >= end and text[start:end] != literal:
                return _fail(
                    ErrorCode.INVALID_COUNTRY_CODE,
                    f"expected country prefix {literal!r}, got {text[start:end]!r}",
                    country=text[start:end],
                    expected=literal,
                )

        for d in layouts:
            if d.length == len(text):
                return d

        expected = sorted(d.length for d in layouts)
        if len(expected) == 1:
            return _fail(
                ErrorCode.INVALID_LENGTH, expected=expected[0], actual=len(text)
            )
        allowed = " or ".join(str(n) for n in expected)
        return _fail(
            ErrorCode.INVALID_LENGTH,
            f"invalid length: expected {allowed}, got {len(text)}",
            expected=expected,
            actual=len(text),
        )
