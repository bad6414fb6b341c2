"""
Payment card numbers (PAN), security codes and expiry dates.

Card numbers are 12 to 19 digits with a Luhn check digit; spaces and "-" are
ignored. The brand comes from the leading digits (issuer identification
number) and does not affect validity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from ..checksum.canonical import canonicalize
from ..engine.descriptor import StructuralDescriptor
from ..engine.specs import Luhn
from ..engine.validator import IdentifierValidator
from ..errors import ErrorCode, ValidationResult

MIN_PAN_LENGTH = 12
MAX_PAN_LENGTH = 19
MAX_YEARS_AHEAD = 20

_DASH = frozenset("-")
_LAYOUTS = tuple(
    StructuralDescriptor.from_tokens([f"number:{n}n"], name=f"card:{n}")
    for n in range(MIN_PAN_LENGTH, MAX_PAN_LENGTH + 1)
)
_SPEC = Luhn()


class CardBrand(str, Enum):
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    AMERICAN_EXPRESS = "AmericanExpress"
    DISCOVER = "Discover"
    CHINA_UNIONPAY = "ChinaUnionPay"
    JCB = "JCB"
    DINERS_CLUB = "DinersClub"
    MAESTRO = "Maestro"
    RUPAY = "RuPay"
    MIR = "Mir"
    VERVE = "Verve"
    TROY = "Troy"
    UNKNOWN = "Unknown"


# First match wins; ranges are inclusive prefixes of equal width.
_BRAND_RANGES: Tuple[Tuple[CardBrand, Tuple[Tuple[str, str], ...]], ...] = (
    (CardBrand.VISA, (("4", "4"),)),
    (CardBrand.AMERICAN_EXPRESS, (("34", "34"), ("37", "37"))),
    (CardBrand.MASTERCARD, (("51", "55"), ("2221", "2720"))),
    (CardBrand.MIR, (("2200", "2204"),)),
    (CardBrand.DISCOVER, (("6011", "6011"), ("65", "65"), ("644", "649"), ("622126", "622925"))),
    (CardBrand.CHINA_UNIONPAY, (("62", "62"),)),
    (CardBrand.JCB, (("3528", "3589"),)),
    (CardBrand.DINERS_CLUB, (("300", "305"), ("309", "309"), ("36", "36"), ("38", "39"))),
    (CardBrand.VERVE, (("506099", "506198"),)),
    (CardBrand.RUPAY, (("60", "60"),)),
    (CardBrand.MAESTRO, (("50", "50"), ("56", "69"))),
    (CardBrand.TROY, (("9792", "9792"),)),
)

# Security code lengths; brands not listed accept 3 or 4 digits.
_CVV_LENGTHS = {
    CardBrand.AMERICAN_EXPRESS: (4,),
    CardBrand.VISA: (3,),
    CardBrand.MASTERCARD: (3,),
    CardBrand.DISCOVER: (3,),
    CardBrand.JCB: (3,),
    CardBrand.DINERS_CLUB: (3,),
    CardBrand.MAESTRO: (3,),
}


@dataclass(frozen=True)
class CardDetails:
    number: str
    brand: CardBrand
    is_valid: bool = True

    @property
    def issuer_identification(self) -> str:
        return self.number[:6]

    @property
    def last_four(self) -> str:
        return self.number[-4:]

    @property
    def masked(self) -> str:
        """All but the last four digits replaced by "*"."""
        return "*" * (len(self.number) - 4) + self.last_four


def card_brand(raw: Optional[str]) -> CardBrand:
    """Brand from the leading digits; UNKNOWN for anything that is not a plausible PAN."""
    canon = canonicalize(raw, _DASH)
    if not canon.ok or not canon.value.isdigit() or len(canon.value) < MIN_PAN_LENGTH:
        return CardBrand.UNKNOWN
    number = canon.value
    for brand, ranges in _BRAND_RANGES:
        if any(lo <= number[: len(lo)] <= hi for lo, hi in ranges):
            return brand
    return CardBrand.UNKNOWN


def _check(raw: Optional[str], validator: Optional[IdentifierValidator]):
    return (validator or IdentifierValidator()).check(raw, _LAYOUTS, _SPEC, _DASH)


def validate_card_number(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> ValidationResult:
    return _check(raw, validator).result


def parse_card_number(raw: Optional[str], validator: Optional[IdentifierValidator] = None) -> Optional[CardDetails]:
    outcome = _check(raw, validator)
    if not outcome.result.is_valid:
        return None
    return CardDetails(number=outcome.text, brand=card_brand(outcome.text))


def validate_cvv(cvv: Optional[str], brand: CardBrand = CardBrand.UNKNOWN) -> ValidationResult:
    if cvv is None or not isinstance(cvv, str) or not cvv.strip():
        return ValidationResult.failure(ErrorCode.INVALID_INPUT)
    code = cvv.strip()
    if not (code.isascii() and code.isdigit()):
        return ValidationResult.failure(ErrorCode.INVALID_FORMAT, "security codes are digits only")
    allowed = _CVV_LENGTHS.get(brand, (3, 4))
    if len(code) not in allowed:
        return ValidationResult.failure(
            ErrorCode.INVALID_LENGTH,
            f"{brand.value} security codes have {' or '.join(map(str, allowed))} digits",
            expected=list(allowed),
            actual=len(code),
        )
    return ValidationResult.success()


def validate_expiration(month: int, year: int, today: Optional[date] = None) -> ValidationResult:
    """
    Expiry month/year check. Two-digit years mean 20YY; a card is valid through
    the end of its expiry month and at most 20 years ahead.
    """
    if not 1 <= month <= 12:
        return ValidationResult.failure(ErrorCode.INVALID_FORMAT, f"invalid month {month}", field="month")
    today = today or datetime.now(timezone.utc).date()
    if year < 100:
        year += 2000
    if (year, month) < (today.year, today.month):
        return ValidationResult.failure(ErrorCode.INVALID_FORMAT, "card has expired", field="year")
    if year > today.year + MAX_YEARS_AHEAD:
        return ValidationResult.failure(
            ErrorCode.INVALID_FORMAT,
            f"expiry year is more than {MAX_YEARS_AHEAD} years ahead",
            field="year",
        )
    return ValidationResult.success()
