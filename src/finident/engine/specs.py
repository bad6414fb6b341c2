"""
Checksum specifications and their dispatch table.

Each identifier kind/country pairs a layout with exactly one `ChecksumSpec`.
The specs are a closed set of frozen, hashable dataclasses; `run_checksum`
looks the runner up by type, the same way named validators are looked up in a
dict. Field names in a spec refer to fields of the layout it is registered
with; `check_spec` verifies that pairing once, at registration time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple, Union

from ..checksum.letters import letter_scheme, mappable, transliterate
from ..checksum.mod97 import iban_checksum_ok, mod97, rf_check_digits
from ..checksum.weighted import (
    CheckDigitRule,
    apply_mode,
    finish_check_value,
    iso7064_mod11_10_check,
    luhn_ok,
    raw_check_value,
    render_check,
    weighted_sum,
)
from ..errors import RegistryError
from .descriptor import CharClass, StructuralDescriptor


# ---- Spec variants -------------------------------------------------------------------------

@dataclass(frozen=True)
class NoChecksum:
    """Structure only (BIC, and BBANs of countries without national check digits)."""


@dataclass(frozen=True)
class Mod97Iban:
    """ISO 13616: rotate the first four characters to the end, remainder must be 1."""


@dataclass(frozen=True)
class Mod97Rf:
    """ISO 11649 creditor reference: "RF" + two check digits + body."""


@dataclass(frozen=True)
class Mod97Check:
    """
    Check field derived from the mod-97 remainder of the payload fields.

    `shift` appends that many zeros to the payload before the remainder is
    taken (French RIB keys, Portuguese NIB and LEI use 2). Letters in the
    payload are allowed when the rule names a letter scheme.
    """
    payload: Tuple[str, ...]
    check: str
    rule: CheckDigitRule = field(default_factory=lambda: CheckDigitRule(mode="remainder"))
    shift: int = 0


@dataclass(frozen=True)
class Luhn:
    """Luhn over `fields` (all fields when empty), letters expanded first if `letters` is set."""
    weights: Tuple[int, ...] = (1, 2)
    fields: Tuple[str, ...] = ()
    letters: Optional[str] = None


@dataclass(frozen=True)
class WeightedMod11:
    """
    Weighted sum over the payload fields.

    With a `check` field the derived value must equal it. Without one the whole
    weighted sum (check digit included in the payload) must be divisible by the
    modulus, as with the Dutch BSN or the Australian TFN.
    When the first weighting yields `fallback_on`, `fallback_weights` are tried
    before the rule's remap/reject apply.
    """
    weights: Tuple[int, ...]
    payload: Tuple[str, ...]
    check: Optional[str] = None
    modulus: int = 11
    rule: CheckDigitRule = field(default_factory=CheckDigitRule)
    fallback_weights: Optional[Tuple[int, ...]] = None
    fallback_on: int = 10


@dataclass(frozen=True)
class Iso7064Mod11_10:
    payload: Tuple[str, ...]
    check: str


@dataclass(frozen=True)
class OddEvenMod26:
    """
    Italian CIN: characters at odd positions (1-based) are looked up in a fixed
    table, even ones count as their value (A=0, 0=0); the sum mod 26 is the
    check letter.
    """
    payload: Tuple[str, ...]
    check: str


@dataclass(frozen=True)
class AllOf:
    """Every part must pass (e.g. Spanish BBANs carry two check digits)."""
    parts: Tuple["ChecksumSpec", ...]


@dataclass(frozen=True)
class AnyOf:
    """At least one part must pass (Norwegian KID: Luhn or mod 11)."""
    parts: Tuple["ChecksumSpec", ...]


ChecksumSpec = Union[
    NoChecksum,
    Mod97Iban,
    Mod97Rf,
    Mod97Check,
    Luhn,
    WeightedMod11,
    Iso7064Mod11_10,
    OddEvenMod26,
    AllOf,
    AnyOf,
]


# ---- Runners -------------------------------------------------------------------------------

def _join(text: str, d: StructuralDescriptor, names: Tuple[str, ...]) -> str:
    return "".join(d.slice(text, n) for n in names)


def _run_none(spec: NoChecksum, text: str, d: StructuralDescriptor) -> bool:
    return True


def _run_iban(spec: Mod97Iban, text: str, d: StructuralDescriptor) -> bool:
    return iban_checksum_ok(text)


def _run_rf(spec: Mod97Rf, text: str, d: StructuralDescriptor) -> bool:
    if len(text) < 5 or not text.startswith("RF"):
        return False
    return rf_check_digits(text[4:]) == text[2:4]


def _run_mod97_check(spec: Mod97Check, text: str, d: StructuralDescriptor) -> bool:
    payload = _join(text, d, spec.payload)
    if not mappable(payload, spec.rule.letters):
        return False
    rem = mod97(transliterate(payload, spec.rule.letters) + "0" * spec.shift)
    if not rem.ok:
        return False
    expected = finish_check_value(apply_mode(rem.value, 97, spec.rule.mode), spec.rule)
    if expected is None:
        return False
    check = d.slice(text, spec.check)
    return render_check(expected, spec.rule, len(check)) == check


def _run_luhn(spec: Luhn, text: str, d: StructuralDescriptor) -> bool:
    digits = _join(text, d, spec.fields) if spec.fields else text
    if not mappable(digits, spec.letters):
        return False
    return luhn_ok(transliterate(digits, spec.letters), spec.weights)


def _run_weighted(spec: WeightedMod11, text: str, d: StructuralDescriptor) -> bool:
    payload = _join(text, d, spec.payload)
    if not mappable(payload, spec.rule.letters):
        return False
    if spec.check is None:
        total = weighted_sum(
            payload, spec.weights, spec.rule.from_right, spec.rule.fold, spec.rule.letters
        )
        return total % spec.modulus == 0

    value = raw_check_value(payload, spec.weights, spec.modulus, spec.rule)
    if spec.fallback_weights and value == spec.fallback_on:
        value = raw_check_value(payload, spec.fallback_weights, spec.modulus, spec.rule)
    expected = finish_check_value(value, spec.rule)
    if expected is None:
        return False
    check = d.slice(text, spec.check)
    return render_check(expected, spec.rule, len(check)) == check


def _run_iso7064(spec: Iso7064Mod11_10, text: str, d: StructuralDescriptor) -> bool:
    expected = iso7064_mod11_10_check(_join(text, d, spec.payload))
    return str(expected) == d.slice(text, spec.check)


# Odd-position values for 0-9 and A-Z (the same table serves the Codice Fiscale).
_ODD_DIGITS = (1, 0, 5, 7, 9, 13, 15, 17, 19, 21)
_ODD_LETTERS = (
    1, 0, 5, 7, 9, 13, 15, 17, 19, 21, 2, 4, 18, 20, 11, 3, 6, 8, 12, 14, 16, 10, 22, 25, 24, 23,
)


def odd_even_mod26(payload: str) -> str:
    """Check letter for an alphanumeric payload (Italian CIN)."""
    total = 0
    for i, ch in enumerate(payload):
        if "0" <= ch <= "9":
            v = int(ch)
            total += _ODD_DIGITS[v] if i % 2 == 0 else v
        elif "A" <= ch <= "Z":
            v = ord(ch) - 65
            total += _ODD_LETTERS[v] if i % 2 == 0 else v
        else:
            raise ValueError(f"unexpected character {ch!r} in {payload!r}")
    return chr(65 + total % 26)


def _run_odd_even(spec: OddEvenMod26, text: str, d: StructuralDescriptor) -> bool:
    return odd_even_mod26(_join(text, d, spec.payload)) == d.slice(text, spec.check)


def _run_all(spec: AllOf, text: str, d: StructuralDescriptor) -> bool:
    return all(run_checksum(part, text, d) for part in spec.parts)


def _run_any(spec: AnyOf, text: str, d: StructuralDescriptor) -> bool:
    return any(run_checksum(part, text, d) for part in spec.parts)


_RUNNERS: Dict[type, Callable[..., bool]] = {
    NoChecksum: _run_none,
    Mod97Iban: _run_iban,
    Mod97Rf: _run_rf,
    Mod97Check: _run_mod97_check,
    Luhn: _run_luhn,
    WeightedMod11: _run_weighted,
    Iso7064Mod11_10: _run_iso7064,
    OddEvenMod26: _run_odd_even,
    AllOf: _run_all,
    AnyOf: _run_any,
}


def run_checksum(spec: ChecksumSpec, text: str, descriptor: StructuralDescriptor) -> bool:
    """
    Run `spec` against canonical `text` that already matches `descriptor`.
    """
    runner = _RUNNERS.get(type(spec))
    if runner is None:
        raise RegistryError(f"unknown checksum spec {type(spec).__name__}")
    return runner(spec, text, descriptor)


# ---- Registration-time checks --------------------------------------------------------------

def _payload_fields(
    d: StructuralDescriptor, names: Tuple[str, ...], what: str, letters: Optional[str] = None
) -> None:
    if not names:
        raise RegistryError(f"{what}: payload must name at least one field")
    if letters is not None:
        try:
            letter_scheme(letters)
        except ValueError as e:
            raise RegistryError(f"{what}: {e}") from e
    for n in names:
        f = d.field(n)
        if f is None:
            raise RegistryError(f"{what}: unknown field {n!r} in layout {d.name!r}")
        if letters is None and f.char_class is not CharClass.DIGIT:
            raise RegistryError(f"{what}: field {n!r} must be a digit field")


def _check_field(
    d: StructuralDescriptor, name: str, rule: CheckDigitRule, what: str
) -> None:
    f = d.field(name)
    if f is None:
        raise RegistryError(f"{what}: unknown check field {name!r} in layout {d.name!r}")
    if rule.alphabet is None and f.char_class is not CharClass.DIGIT:
        raise RegistryError(f"{what}: check field {name!r} must be a digit field")


def _check_weights(weights: Tuple[int, ...], modulus: int, what: str) -> None:
    if not weights:
        raise RegistryError(f"{what}: weights must not be empty")
    if modulus < 2:
        raise RegistryError(f"{what}: modulus must be >= 2")


def check_spec(spec: ChecksumSpec, descriptor: StructuralDescriptor) -> None:
    """Raise RegistryError if `spec` cannot run against `descriptor`."""
    what = type(spec).__name__
    if isinstance(spec, (NoChecksum, Mod97Iban, Mod97Rf)):
        return
    if isinstance(spec, Mod97Check):
        if spec.shift < 0:
            raise RegistryError(f"{what}: shift must be >= 0")
        _payload_fields(descriptor, spec.payload, what, spec.rule.letters)
        _check_field(descriptor, spec.check, spec.rule, what)
    elif isinstance(spec, Luhn):
        _check_weights(spec.weights, 10, what)
        names = spec.fields or tuple(f.name for f in descriptor.fields)
        _payload_fields(descriptor, names, what, spec.letters)
    elif isinstance(spec, WeightedMod11):
        _check_weights(spec.weights, spec.modulus, what)
        if spec.fallback_weights is not None:
            _check_weights(spec.fallback_weights, spec.modulus, what)
        _payload_fields(descriptor, spec.payload, what, spec.rule.letters)
        if spec.check is not None:
            _check_field(descriptor, spec.check, spec.rule, what)
    elif isinstance(spec, Iso7064Mod11_10):
        _payload_fields(descriptor, spec.payload, what)
        _check_field(descriptor, spec.check, CheckDigitRule(), what)
    elif isinstance(spec, OddEvenMod26):
        _payload_fields(descriptor, spec.payload, what, "base36")
        if descriptor.field(spec.check) is None:
            raise RegistryError(f"{what}: unknown check field {spec.check!r} in layout {descriptor.name!r}")
    elif isinstance(spec, (AllOf, AnyOf)):
        if not spec.parts:
            raise RegistryError(f"{what} needs at least one part")
        for part in spec.parts:
            check_spec(part, descriptor)
    else:
        raise RegistryError(f"unknown checksum spec {what}")
