"""
Securities and legal-entity identifiers.

    ISIN   US 037833100 5        country + NSIN + Luhn digit (ISO 6166)
    CUSIP  037833 10 0           issuer + issue + check digit
    SEDOL  B0YBKJ 7              six characters (no vowels) + check digit
    LEI    5493 001KJTIIGC8Y1R 12  LOU prefix + entity + ISO 7064 MOD 97-10 (ISO 17442)

Letters count as A=10 ... Z=35 in every check. Spaces are ignored everywhere;
ISIN, CUSIP and SEDOL also tolerate "-".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..checksum.canonical import canonicalize
from ..checksum.letters import transliterate
from ..checksum.weighted import CheckDigitRule, compute_check_digit, luhn_check_digit
from ..engine.descriptor import StructuralDescriptor
from ..engine.specs import Luhn, Mod97Check, WeightedMod11, check_spec
from ..engine.validator import IdentifierValidator, Outcome
from ..errors import ErrorCode, ValidationResult

_DASH = frozenset("-")

_ISIN = StructuralDescriptor.from_tokens(["country_code:2a", "nsin:9c", "check_digit:1n"], name="isin")
_ISIN_SPEC = Luhn(letters="base36")

_CUSIP = StructuralDescriptor.from_tokens(["issuer_number:6c", "issue_number:2c", "check_digit:1n"], name="cusip")
_CUSIP_RULE = CheckDigitRule(fold="digit_sum", letters="base36")
_CUSIP_SPEC = WeightedMod11(
    weights=(1, 2),
    payload=("issuer_number", "issue_number"),
    check="check_digit",
    modulus=10,
    rule=_CUSIP_RULE,
)

_SEDOL = StructuralDescriptor.from_tokens(["base_code:6c", "check_digit:1n"], name="sedol")
_SEDOL_WEIGHTS = (1, 3, 1, 7, 3, 9)
_SEDOL_RULE = CheckDigitRule(letters="base36")
_SEDOL_SPEC = WeightedMod11(
    weights=_SEDOL_WEIGHTS, payload=("base_code",), check="check_digit", modulus=10, rule=_SEDOL_RULE
)
_VOWELS = frozenset("AEIOU")

_LEI = StructuralDescriptor.from_tokens(["lou_prefix:4c", "entity:14c", "check_digits:2n"], name="lei")
_LEI_SPEC = Mod97Check(
    payload=("lou_prefix", "entity"),
    check="check_digits",
    rule=CheckDigitRule(mode="iso7064", letters="base36"),
    shift=2,
)

for _spec, _layout in (
    (_ISIN_SPEC, _ISIN),
    (_CUSIP_SPEC, _CUSIP),
    (_SEDOL_SPEC, _SEDOL),
    (_LEI_SPEC, _LEI),
):
    check_spec(_spec, _layout)


@dataclass(frozen=True)
class IsinDetails:
    isin: str
    country_code: str
    nsin: str
    check_digit: str
    is_valid: bool = True


@dataclass(frozen=True)
class CusipDetails:
    cusip: str
    issuer_number: str
    issue_number: str
    check_digit: str
    is_valid: bool = True


@dataclass(frozen=True)
class SedolDetails:
    sedol: str
    base_code: str
    check_digit: str
    is_valid: bool = True


@dataclass(frozen=True)
class LeiDetails:
    lei: str
    lou_prefix: str
    entity: str
    check_digits: str
    is_valid: bool = True


def _validator(validator: Optional[IdentifierValidator]) -> IdentifierValidator:
    return validator or IdentifierValidator()


def _base(text: str, width: int, what: str) -> str:
    canon = canonicalize(text, _DASH)
    if not canon.ok or len(canon.value) != width:
        raise ValueError(f"{what} must be {width} letters or digits, got {text!r}")
    return canon.value


# ---- ISIN ---------------------------------------------------------------------------------

def _isin(raw, validator):
    return _validator(validator).check(raw, [_ISIN], _ISIN_SPEC, _DASH)


def validate_isin(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> ValidationResult:
    return _isin(raw, validator).result


def parse_isin(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> Optional[IsinDetails]:
    outcome = _isin(raw, validator)
    if not outcome.result.is_valid:
        return None
    text = outcome.text
    return IsinDetails(isin=text, country_code=text[:2], nsin=text[2:11], check_digit=text[11])


def generate_isin(country_code: str, nsin: str) -> str:
    """
    ISIN for a two-letter country code and a nine-character NSIN.

    >>> generate_isin("US", "037833100")
    'US0378331005'

    Raises:
        ValueError: for a malformed country code or NSIN.
    """
    base = _base(country_code, 2, "country code") + _base(nsin, 9, "NSIN")
    isin = base + str(luhn_check_digit(transliterate(base, "base36")))
    result = validate_isin(isin)
    if not result.is_valid:
        raise ValueError(f"cannot build ISIN: {result.message}")
    return isin


# ---- CUSIP --------------------------------------------------------------------------------

def _cusip(raw, validator):
    return _validator(validator).check(raw, [_CUSIP], _CUSIP_SPEC, _DASH)


def validate_cusip(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> ValidationResult:
    return _cusip(raw, validator).result


def parse_cusip(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> Optional[CusipDetails]:
    outcome = _cusip(raw, validator)
    if not outcome.result.is_valid:
        return None
    text = outcome.text
    return CusipDetails(cusip=text, issuer_number=text[:6], issue_number=text[6:8], check_digit=text[8])


def generate_cusip(issuer_number: str, issue_number: str) -> str:
    """
    CUSIP for a six-character issuer number and a two-character issue number.

    Raises:
        ValueError: for malformed parts.
    """
    base = _base(issuer_number, 6, "issuer number") + _base(issue_number, 2, "issue number")
    return base + str(compute_check_digit(base, (1, 2), 10, _CUSIP_RULE))


# ---- SEDOL --------------------------------------------------------------------------------

def _sedol(raw, validator) -> Outcome:
    v = _validator(validator)
    outcome = v.check(raw, [_SEDOL], _SEDOL_SPEC, _DASH)
    if outcome.result.error_code not in (None, ErrorCode.INVALID_CHECKSUM):
        return outcome
    text = v.canonical(raw, _DASH).value
    if _VOWELS & set(text[:6]):
        return Outcome(
            ValidationResult.failure(
                ErrorCode.INVALID_FORMAT, "SEDOL codes contain no vowels", field="base_code"
            )
        )
    return outcome


def validate_sedol(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> ValidationResult:
    return _sedol(raw, validator).result


def parse_sedol(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> Optional[SedolDetails]:
    outcome = _sedol(raw, validator)
    if not outcome.result.is_valid:
        return None
    text = outcome.text
    return SedolDetails(sedol=text, base_code=text[:6], check_digit=text[6])


def generate_sedol(base_code: str) -> str:
    """
    SEDOL for a six-character base code.

    Raises:
        ValueError: for a malformed base code or one containing a vowel.
    """
    base = _base(base_code, 6, "SEDOL base code")
    if _VOWELS & set(base):
        raise ValueError(f"SEDOL base codes contain no vowels, got {base_code!r}")
    return base + str(compute_check_digit(base, _SEDOL_WEIGHTS, 10, _SEDOL_RULE))


# ---- LEI ----------------------------------------------------------------------------------

def _lei(raw, validator):
    return _validator(validator).check(raw, [_LEI], _LEI_SPEC)


def validate_lei(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> ValidationResult:
    return _lei(raw, validator).result


def parse_lei(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> Optional[LeiDetails]:
    outcome = _lei(raw, validator)
    if not outcome.result.is_valid:
        return None
    text = outcome.text
    return LeiDetails(lei=text, lou_prefix=text[:4], entity=text[4:18], check_digits=text[18:])
