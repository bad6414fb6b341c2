"""
ISO 7064 MOD 97-10, as used by IBAN (ISO 13616) and RF creditor references
(ISO 11649).

The number is folded in blocks of at most nine digits so intermediate values
stay small: acc = (acc * 10**len(block) + block) % 97. This yields the same
remainder as the big-integer computation for any input length.
"""

from __future__ import annotations

from ..errors import ErrorCode, Result

_BLOCK = 9


def mod97(digits: str) -> Result[int]:
    """Remainder of a decimal digit string modulo 97."""
    if not digits:
        return Result.fail(ErrorCode.INVALID_INPUT)
    if not (digits.isascii() and digits.isdigit()):
        return Result.fail(ErrorCode.INVALID_FORMAT, "mod97 input must contain only digits")

    acc = 0
    for i in range(0, len(digits), _BLOCK):
        block = digits[i : i + _BLOCK]
        acc = (acc * 10 ** len(block) + int(block)) % 97
    return Result.of(acc)


def letter_to_digits(s: str) -> Result[str]:
    """
    Replace letters A..Z with 10..35; digits pass through unchanged.

    Example: "RF00" -> "2715" + "00".
    """
    out = []
    for pos, ch in enumerate(s):
        if "0" <= ch <= "9":
            out.append(ch)
        elif "A" <= ch <= "Z":
            out.append(str(ord(ch) - 55))  # ord('A') == 65 -> 10
        else:
            return Result.fail(
                ErrorCode.INVALID_FORMAT,
                f"invalid character {ch!r} at position {pos}",
                char=ch,
                position=pos,
            )
    return Result.of("".join(out))


def _mod97_alnum(text: str) -> Result[int]:
    mapped = letter_to_digits(text)
    if not mapped.ok:
        return Result(error=mapped.error)
    return mod97(mapped.value)


def iban_checksum_ok(text: str) -> bool:
    """
    IBAN check: move the first four characters to the end, map letters,
    and require remainder 1.
    """
    if len(text) < 5:
        return False
    rem = _mod97_alnum(text[4:] + text[:4])
    return rem.ok and rem.value == 1


def iban_check_digits(country_code: str, bban: str) -> str:
    """Two check digits for `country_code` + `bban` (both canonical)."""
    rem = _mod97_alnum(bban + country_code + "00")
    if not rem.ok:
        raise ValueError(rem.error.message)
    return f"{98 - rem.value:02d}"


def rf_check_digits(body: str) -> str:
    """Two check digits of an RF creditor reference for `body`."""
    rem = _mod97_alnum(body + "RF00")
    if not rem.ok:
        raise ValueError(rem.error.message)
    return f"{98 - rem.value:02d}"
