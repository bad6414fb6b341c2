"""
Input canonicalization.

Every identifier goes through here before any length or checksum logic runs.
The output (`CanonicalText`) contains only uppercase ASCII letters and digits.

Rules
-----
- ASCII whitespace is always removed (people paste "BE68 5390 0754 7034").
- Characters in the caller's `strip_set` are removed too; which separators are
  tolerated depends on the identifier kind (e.g. "." and "-" for a Brazilian CPF).
- Anything else is an `InvalidFormat` failure rather than silently dropped, so
  "BE68_5390..." is rejected instead of being "fixed".
- Only ASCII is accepted; "ß".upper() == "SS" must never sneak a letter in.
"""

from __future__ import annotations

from typing import AbstractSet, NewType, Optional

from ..errors import ErrorCode, Result

CanonicalText = NewType("CanonicalText", str)

_WHITESPACE = frozenset(" \t\r\n\f\v")


def canonicalize(
    raw: Optional[str], strip_set: AbstractSet[str] = frozenset()
) -> Result[CanonicalText]:
    """
    Strip formatting, upper-case, and check the character set.

    Args:
        raw: Free-form user input.
        strip_set: Separator characters this identifier kind tolerates.

    Returns:
        `Result` holding the canonical text, or an `InvalidInput` /
        `InvalidFormat` failure.
    """
    if raw is None or not isinstance(raw, str):
        return Result.fail(ErrorCode.INVALID_INPUT)

    out = []
    for pos, ch in enumerate(raw):
        if ch in _WHITESPACE or ch in strip_set:
            continue
        if not (ch.isascii() and ch.isalnum()):
            return Result.fail(
                ErrorCode.INVALID_FORMAT,
                f"invalid character {ch!r} at position {pos}",
                char=ch,
                position=pos,
            )
        out.append(ch.upper())

    if not out:
        return Result.fail(ErrorCode.INVALID_INPUT)
    return Result.of(CanonicalText("".join(out)))
