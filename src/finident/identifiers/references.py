"""
Payment references.

- ISO 11649 creditor references: "RF" + 2 check digits + up to 21 letters/digits,
  e.g. "RF18 5390 0754 7034". Valid in every country.
- Belgian structured communication (OGM/VCS): 10 digits + 2 mod-97 check digits,
  printed as "+++090/9337/55493+++". A remainder of 0 is written as 97.
- Finnish, Norwegian (KID) and Swedish (OCR) references live in the
  payment_reference rule pack next to the Belgian one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from ..checksum.canonical import canonicalize
from ..checksum.mod97 import mod97, rf_check_digits
from ..engine.descriptor import StructuralDescriptor
from ..engine.loader import get_registry
from ..engine.registry import CountryRegistry
from ..engine.specs import Mod97Rf
from ..engine.validator import IdentifierValidator
from ..errors import ErrorCode, ValidationResult

RF_MIN_LENGTH = 5
RF_MAX_LENGTH = 25
RF_MAX_BODY = RF_MAX_LENGTH - 4
OGM_REFERENCE_DIGITS = 10

# One layout per possible body width.
_RF_LAYOUTS: Dict[int, StructuralDescriptor] = {
    n: StructuralDescriptor.from_tokens(
        ["prefix:2a=RF", "check_digits:2n", f"reference:{n}c"], name=f"rf:{n}"
    )
    for n in range(1, RF_MAX_BODY + 1)
}
_RF_SPEC = Mod97Rf()


class ReferenceFormat(str, Enum):
    ISO_RF = "iso_rf"
    LOCAL = "local"


@dataclass(frozen=True)
class RfDetails:
    reference: str
    check_digits: str
    content: str
    format: ReferenceFormat = ReferenceFormat.ISO_RF
    is_valid: bool = True

    @property
    def formatted(self) -> str:
        return " ".join(self.reference[i : i + 4] for i in range(0, len(self.reference), 4))


# ---- ISO 11649 ----------------------------------------------------------------------------

def generate_rf(content: str) -> str:
    """
    Creditor reference for `content` (1..21 letters/digits, spaces ignored).

    >>> generate_rf("1")
    'RF741'

    Raises:
        ValueError: for empty content, content over 21 characters, or
            characters other than letters and digits.
    """
    body = canonicalize(content)
    if not body.ok:
        raise ValueError(f"invalid reference content: {body.error.message}")
    if len(body.value) > RF_MAX_BODY:
        raise ValueError(f"reference content is limited to {RF_MAX_BODY} characters")
    return "RF" + rf_check_digits(body.value) + body.value


def _rf_outcome(raw: Optional[str], validator: IdentifierValidator):
    canon = validator.canonical(raw)
    if not canon.ok:
        return canon.error, None
    text = canon.value
    if not RF_MIN_LENGTH <= len(text) <= RF_MAX_LENGTH:
        return (
            ValidationResult.failure(
                ErrorCode.INVALID_LENGTH,
                f"RF references are {RF_MIN_LENGTH} to {RF_MAX_LENGTH} characters, got {len(text)}",
                min=RF_MIN_LENGTH,
                max=RF_MAX_LENGTH,
                actual=len(text),
            ),
            None,
        )
    outcome = validator.check(text, [_RF_LAYOUTS[len(text) - 4]], _RF_SPEC)
    return outcome.result, outcome.text


def validate_rf(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> ValidationResult:
    result, _ = _rf_outcome(raw, validator or IdentifierValidator())
    return result


def parse_rf(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> Optional[RfDetails]:
    result, text = _rf_outcome(raw, validator or IdentifierValidator())
    if not result.is_valid:
        return None
    return RfDetails(reference=text, check_digits=text[2:4], content=text[4:])


# ---- Belgian OGM/VCS -----------------------------------------------------------------------

def _ogm_check(reference: str) -> str:
    rem = mod97(reference).value
    return f"{rem or 97:02d}"


def format_ogm(raw: Optional[str]) -> str:
    """'+++ddd/dddd/ddddd+++' for a 12-digit structured communication."""
    canon = canonicalize(raw, frozenset("+/*"))
    if not canon.ok or len(canon.value) != 12 or not canon.value.isdigit():
        raise ValueError(f"not a 12-digit structured communication: {raw!r}")
    d = canon.value
    return f"+++{d[:3]}/{d[3:7]}/{d[7:]}+++"


def generate_ogm(reference: Union[int, str]) -> str:
    """
    Structured communication for a reference of up to 10 digits
    (left-padded with zeros).

    Raises:
        ValueError: for negative numbers, non-digits or more than 10 digits.
    """
    digits = str(reference).strip()
    if not digits.isascii() or not digits.isdigit() or len(digits) > OGM_REFERENCE_DIGITS:
        raise ValueError(f"reference must be 1 to {OGM_REFERENCE_DIGITS} digits, got {reference!r}")
    digits = digits.zfill(OGM_REFERENCE_DIGITS)
    return format_ogm(digits + _ogm_check(digits))


def validate_ogm(raw: Optional[str], registry: Optional[CountryRegistry] = None) -> ValidationResult:
    reg = registry if registry is not None else get_registry("payment_reference")
    return reg.validate("BE", raw)


# ---- Dispatch ------------------------------------------------------------------------------

def validate_payment_reference(
    raw: Optional[str],
    country_code: Optional[str] = None,
    registry: Optional[CountryRegistry] = None,
) -> ValidationResult:
    """
    ISO RF when the reference starts with "RF", otherwise the local format of
    `country_code` (BE, FI, NO, SE). Without a country only RF references can
    be checked.
    """
    reg = registry if registry is not None else get_registry("payment_reference")
    canon = reg.validator.canonical(raw, frozenset("+/*"))
    if canon.ok and canon.value.startswith("RF"):
        return validate_rf(canon.value, reg.validator)
    if country_code is None:
        if not canon.ok:
            return canon.error
        return ValidationResult.failure(
            ErrorCode.INVALID_FORMAT, "not an RF reference and no country given"
        )
    return reg.validate(country_code, raw)
