"""
Weighted-sum check digits.

Most national identifiers follow the same recipe:

    total = sum(digit[i] * weights[i % len(weights)])
    value = modulus - total % modulus      ("complement")
         or total % modulus                ("remainder")

followed by a small per-country fix-up: some values are remapped (Spain turns
10 into 1, Brazil turns 10 into 0, Belgium turns 0 into 97) and some values have
no valid check digit at all (Norway rejects 10). Those fix-ups are data, carried
in `CheckDigitRule`, never code.

Variations also covered here:
- Luhn (weights 1,2 from the right, doubled products cross-summed).
- Product folding (Mexican CLABE keeps only the last digit of each product).
- Letters with a numeric value (CUSIP, SEDOL, Spanish NIE), see `letters.py`.
- ISO 7064 MOD 11,10 (German and Croatian tax numbers).

These helpers expect digit strings unless the rule names a letter scheme. The
validator checks field classes before any checksum runs, so anything else here
is a programmer error (`ValueError`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Literal, Mapping, Optional, Sequence, Tuple, Union

from .letters import char_values, letter_scheme

Mode = Literal["complement", "remainder", "iso7064"]
Fold = Literal["none", "digit_sum", "last_digit"]


@dataclass(frozen=True)
class CheckDigitRule:
    """
    How a weighted sum turns into a check value.

    Attributes:
        mode:       "complement" -> (modulus - sum % modulus) % modulus,
                    "remainder"  -> sum % modulus,
                    "iso7064"    -> modulus + 1 - sum % modulus (98 - r for mod 97).
        remap:      derived value -> declared replacement (e.g. {10: 0}).
                    Stored as sorted (value, replacement) pairs.
        reject:     derived values for which no valid check digit exists.
        alphabet:   render the value as alphabet[value] (e.g. "10X98765432").
        fold:       how each product is reduced before summing.
        from_right: align weights from the rightmost digit instead of the left.
        letters:    letter scheme giving letters a value ("base36", "rib", "nie").
    """
    mode: Mode = "complement"
    remap: Union[Tuple[Tuple[int, int], ...], Mapping[int, int]] = ()
    reject: AbstractSet[int] = frozenset()
    alphabet: Optional[str] = None
    fold: Fold = "none"
    from_right: bool = False
    letters: Optional[str] = None

    def __post_init__(self) -> None:
        pairs = self.remap.items() if isinstance(self.remap, Mapping) else self.remap
        object.__setattr__(self, "remap", tuple(sorted((int(k), int(v)) for k, v in pairs)))
        object.__setattr__(self, "reject", frozenset(self.reject))
        if self.letters is not None:
            letter_scheme(self.letters)


LUHN = CheckDigitRule(mode="complement", fold="digit_sum", from_right=True)


def _require_digits(digits: str) -> None:
    if not (digits and digits.isascii() and digits.isdigit()):
        raise ValueError(f"expected a non-empty digit string, got {digits!r}")


def _fold(product: int, fold: Fold) -> int:
    if fold == "digit_sum":
        return sum(int(c) for c in str(abs(product)))
    if fold == "last_digit":
        return product % 10
    return product


def weighted_sum(
    digits: str,
    weights: Sequence[int],
    from_right: bool = False,
    fold: Fold = "none",
    letters: Optional[str] = None,
) -> int:
    """Sum of value * weight, cycling through `weights`."""
    values = char_values(digits, letters)
    if not weights:
        raise ValueError("weights must not be empty")
    seq = reversed(values) if from_right else values
    n = len(weights)
    return sum(_fold(v * weights[i % n], fold) for i, v in enumerate(seq))


def apply_mode(rem: int, modulus: int, mode: Mode) -> int:
    if mode == "complement":
        return (modulus - rem) % modulus
    if mode == "iso7064":
        return modulus + 1 - rem
    return rem


def raw_check_value(
    digits: str, weights: Sequence[int], modulus: int, rule: CheckDigitRule
) -> int:
    """Check value before the rule's reject/remap fix-ups."""
    if modulus < 2:
        raise ValueError(f"modulus must be >= 2, got {modulus}")
    total = weighted_sum(digits, weights, rule.from_right, rule.fold, rule.letters)
    return apply_mode(total % modulus, modulus, rule.mode)


def finish_check_value(value: int, rule: CheckDigitRule) -> Optional[int]:
    """Apply reject and remap; None means no valid check digit exists."""
    if value in rule.reject:
        return None
    for src, dst in rule.remap:
        if src == value:
            return dst
    return value


def compute_check_digit(
    digits: str, weights: Sequence[int], modulus: int, rule: CheckDigitRule
) -> Optional[int]:
    """
    Derive the check value for `digits`.

    Returns:
        The check value, or None when the payload has no valid check digit
        (a value listed in `rule.reject`).
    """
    return finish_check_value(raw_check_value(digits, weights, modulus, rule), rule)


def render_check(value: int, rule: CheckDigitRule, width: int = 1) -> str:
    """Text form of a check value, as it appears in the identifier."""
    if rule.alphabet is not None:
        return rule.alphabet[value]
    return f"{value:0{width}d}"


def verify(
    full_value: str,
    weights: Sequence[int],
    modulus: int,
    rule: CheckDigitRule,
    check_width: int = 1,
) -> bool:
    """True if the trailing `check_width` characters match the derived check value."""
    if len(full_value) <= check_width:
        return False
    payload, check = full_value[:-check_width], full_value[-check_width:]
    expected = compute_check_digit(payload, weights, modulus, rule)
    if expected is None:
        return False
    return render_check(expected, rule, check_width) == check


def luhn_ok(digits: str, weights: Sequence[int] = (1, 2)) -> bool:
    """
    Luhn ("mod 10") over a digit string that already includes its check digit.

    Weights are applied from the rightmost digit; products above 9 are
    cross-summed (16 -> 1 + 6 -> 7).
    """
    return weighted_sum(digits, weights, from_right=True, fold="digit_sum") % 10 == 0


def luhn_check_digit(payload: str) -> int:
    """Digit to append to `payload` so the result passes `luhn_ok`."""
    _require_digits(payload)
    return (10 - weighted_sum(payload, (2, 1), from_right=True, fold="digit_sum") % 10) % 10


def iso7064_mod11_10_check(digits: str) -> int:
    """ISO 7064 MOD 11,10 check digit for `digits` (hybrid system)."""
    _require_digits(digits)
    product = 10
    for ch in digits:
        s = (int(ch) + product) % 10
        if s == 0:
            s = 10
        product = (2 * s) % 11
    return (11 - product) % 10
