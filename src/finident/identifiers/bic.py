"""
Business Identifier Codes (ISO 9362 / SWIFT).

8 characters (primary office) or 11 (with branch):

    DEUT DE FF [500]
    bank country location [branch]

There is no check digit; validation is structural. An 8-character code is the
same institution as the 11-character one with branch "XXX".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..engine.descriptor import StructuralDescriptor
from ..engine.registry import CountryRegistry
from ..engine.specs import NoChecksum
from ..engine.validator import IdentifierValidator
from ..errors import ErrorCode, ValidationResult
from .iban import parse_iban, validate_iban

PRIMARY_BRANCH = "XXX"

_LAYOUTS = (
    StructuralDescriptor.from_tokens(
        ["bank_code:4a", "country_code:2a", "location_code:2c"], name="bic:8"
    ),
    StructuralDescriptor.from_tokens(
        ["bank_code:4a", "country_code:2a", "location_code:2c", "branch_code:3c"],
        name="bic:11",
    ),
)
_SPEC = NoChecksum()


@dataclass(frozen=True)
class BicDetails:
    bic: str
    bank_code: str
    country_code: str
    location_code: str
    branch_code: str = PRIMARY_BRANCH
    is_valid: bool = True

    @property
    def is_primary_office(self) -> bool:
        return self.branch_code == PRIMARY_BRANCH

    @property
    def is_test_bic(self) -> bool:
        # Location codes ending in "0" are SWIFT test and training codes.
        return self.location_code.endswith("0")


def _check(raw: Optional[str], validator: Optional[IdentifierValidator]):
    return (validator or IdentifierValidator()).check(raw, _LAYOUTS, _SPEC)


def validate_bic(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> ValidationResult:
    return _check(raw, validator).result


def parse_bic(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> Optional[BicDetails]:
    outcome = _check(raw, validator)
    if not outcome.result.is_valid:
        return None
    text, d = outcome.text, outcome.descriptor
    return BicDetails(
        bic=text,
        bank_code=d.slice(text, "bank_code"),
        country_code=d.slice(text, "country_code"),
        location_code=d.slice(text, "location_code"),
        branch_code=d.slice(text, "branch_code") if d.field("branch_code") else PRIMARY_BRANCH,
    )


def is_bic_consistent_with_iban(
    bic: Optional[str],
    iban: Optional[str],
    registry: Optional[CountryRegistry] = None,
) -> ValidationResult:
    """
    Both must be valid and name the same country.

    `registry` is the IBAN registry; its validator (and input cap) also applies
    to the BIC. Returns InvalidCountryCode when they disagree, otherwise the
    first failure of either code.
    """
    validator = registry.validator if registry is not None else None
    bic_details = parse_bic(bic, validator)
    if bic_details is None:
        return validate_bic(bic, validator)
    iban_details = parse_iban(iban, registry)
    if iban_details is None:
        return validate_iban(iban, registry)
    if bic_details.country_code != iban_details.country_code:
        return ValidationResult.failure(
            ErrorCode.INVALID_COUNTRY_CODE,
            f"BIC country {bic_details.country_code!r} does not match "
            f"IBAN country {iban_details.country_code!r}",
            country=bic_details.country_code,
            expected=iban_details.country_code,
        )
    return ValidationResult.success()
