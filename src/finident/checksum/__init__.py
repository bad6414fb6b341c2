"""Checksum primitives shared by every identifier kind."""

from .canonical import CanonicalText, canonicalize
from .letters import LETTER_VALUES, char_values, transliterate
from .mod97 import (
    iban_check_digits,
    iban_checksum_ok,
    letter_to_digits,
    mod97,
    rf_check_digits,
)
from .weighted import (
    LUHN,
    CheckDigitRule,
    compute_check_digit,
    iso7064_mod11_10_check,
    luhn_check_digit,
    luhn_ok,
    verify,
    weighted_sum,
)

__all__ = [
    "CanonicalText",
    "canonicalize",
    "LETTER_VALUES",
    "char_values",
    "transliterate",
    "mod97",
    "letter_to_digits",
    "iban_checksum_ok",
    "iban_check_digits",
    "rf_check_digits",
    "CheckDigitRule",
    "LUHN",
    "weighted_sum",
    "compute_check_digit",
    "verify",
    "luhn_ok",
    "luhn_check_digit",
    "iso7064_mod11_10_check",
]
