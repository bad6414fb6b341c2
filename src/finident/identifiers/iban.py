"""
IBAN (ISO 13616) and BBAN helpers.

The country is taken from the first two characters, so callers do not need to
know it up front:

    >>> validate_iban("BE68 5390 0754 7034").is_valid
    True
    >>> parse_iban("GB29 NWBK 6016 1331 9268 19").bank_code
    'NWBK'

IBAN validation checks the layout and the ISO 7064 mod-97 digits only. National
BBAN check digits (for example Belgium, Spain, France, Italy, Portugal
and Slovakia) are checked by `validate_bban`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from ..checksum.canonical import canonicalize
from ..checksum.mod97 import iban_check_digits
from ..engine.loader import get_registry
from ..engine.parser import ParsedDetails
from ..engine.registry import CountryRegistry
from ..errors import ErrorCode, ValidationResult


@dataclass(frozen=True)
class IbanDetails:
    iban: str
    country_code: str
    check_digits: str
    bban: str
    bank_code: Optional[str] = None
    branch_code: Optional[str] = None
    account_number: Optional[str] = None
    national_check: Optional[str] = None
    fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    is_valid: bool = True

    @property
    def formatted(self) -> str:
        return format_iban(self.iban)


def _registry(kind: str, registry: Optional[CountryRegistry]) -> CountryRegistry:
    return registry if registry is not None else get_registry(kind)


def _country_and_text(raw, registry: CountryRegistry):
    """(country code, canonical text) or a failing ValidationResult."""
    canon = registry.validator.canonical(raw)
    if not canon.ok:
        return canon.error
    code = canon.value[:2]
    if len(code) < 2 or not code.isalpha():
        return ValidationResult.failure(ErrorCode.INVALID_COUNTRY_CODE, country=code)
    return code, canon.value


def validate_iban(raw: Optional[str], registry: Optional[CountryRegistry] = None) -> ValidationResult:
    reg = _registry("iban", registry)
    found = _country_and_text(raw, reg)
    if isinstance(found, ValidationResult):
        return found
    code, text = found
    return reg.validate(code, text)


def parse_iban(raw: Optional[str], registry: Optional[CountryRegistry] = None) -> Optional[IbanDetails]:
    """Breakdown of a valid IBAN; None if it does not validate."""
    reg = _registry("iban", registry)
    found = _country_and_text(raw, reg)
    if isinstance(found, ValidationResult):
        return None
    code, text = found
    parsed = reg.parse(code, text)
    if parsed is None:
        return None
    return _details(parsed)


def _details(parsed: ParsedDetails) -> IbanDetails:
    bban = parsed.value[4:]
    national = parsed.get("national_check")
    if national is None and parsed.get("bank_check") is not None:
        national = parsed["bank_check"] + parsed["account_check"]
    return IbanDetails(
        iban=parsed.value,
        country_code=parsed.country_code,
        check_digits=parsed["check_digits"],
        bban=bban,
        bank_code=parsed.get("bank_code"),
        branch_code=parsed.get("branch_code"),
        account_number=parsed.get("account_number"),
        national_check=national,
        fields=parsed.fields,
    )


def compute_iban_check_digits(country_code: str, bban: str) -> str:
    """
    Two IBAN check digits for a country code and BBAN.

    Raises:
        ValueError: if either part contains characters other than letters/digits.
    """
    cc = canonicalize(country_code)
    body = canonicalize(bban)
    if not cc.ok or len(cc.value) != 2 or not cc.value.isalpha():
        raise ValueError(f"invalid country code {country_code!r}")
    if not body.ok:
        raise ValueError(f"invalid BBAN: {body.error.message}")
    return iban_check_digits(cc.value, body.value)


def build_iban(
    country_code: str, bban: str, registry: Optional[CountryRegistry] = None
) -> str:
    """
    Assemble a complete IBAN from its country code and BBAN.

    Raises:
        ValueError: if the result is not a valid IBAN for that country (unknown
            country, wrong BBAN length or format).
    """
    check = compute_iban_check_digits(country_code, bban)
    iban = country_code.strip().upper() + check + canonicalize(bban).value
    result = validate_iban(iban, registry)
    if not result.is_valid:
        raise ValueError(f"cannot build IBAN: {result.message}")
    return iban


def format_iban(raw: Optional[str]) -> str:
    """Print format: groups of four ("BE68 5390 0754 7034"); "" for empty input."""
    if not raw:
        return ""
    compact = "".join(ch for ch in raw.upper() if ch.isascii() and ch.isalnum())
    return " ".join(compact[i : i + 4] for i in range(0, len(compact), 4))


# ---- BBAN ----------------------------------------------------------------------------------

def validate_bban(
    country_code: str, raw: Optional[str], registry: Optional[CountryRegistry] = None
) -> ValidationResult:
    """Domestic account number, including national check digits where defined."""
    return _registry("bban", registry).validate(country_code, raw)


def parse_bban(
    country_code: str, raw: Optional[str], registry: Optional[CountryRegistry] = None
) -> Optional[ParsedDetails]:
    return _registry("bban", registry).parse(country_code, raw)
