"""Identifier-specific facades over the generic engine."""

from .bic import BicDetails, is_bic_consistent_with_iban, parse_bic, validate_bic
from .cards import (
    CardBrand,
    CardDetails,
    card_brand,
    parse_card_number,
    validate_card_number,
    validate_cvv,
    validate_expiration,
)
from .iban import (
    IbanDetails,
    build_iban,
    compute_iban_check_digits,
    format_iban,
    parse_bban,
    parse_iban,
    validate_bban,
    validate_iban,
)
from .references import (
    ReferenceFormat,
    RfDetails,
    format_ogm,
    generate_ogm,
    generate_rf,
    parse_rf,
    validate_ogm,
    validate_payment_reference,
    validate_rf,
)
from .securities import (
    CusipDetails,
    IsinDetails,
    LeiDetails,
    SedolDetails,
    generate_cusip,
    generate_isin,
    generate_sedol,
    parse_cusip,
    parse_isin,
    parse_lei,
    parse_sedol,
    validate_cusip,
    validate_isin,
    validate_lei,
    validate_sedol,
)

__all__ = [
    "BicDetails",
    "is_bic_consistent_with_iban",
    "parse_bic",
    "validate_bic",
    "CardBrand",
    "CardDetails",
    "card_brand",
    "parse_card_number",
    "validate_card_number",
    "validate_cvv",
    "validate_expiration",
    "IbanDetails",
    "build_iban",
    "compute_iban_check_digits",
    "format_iban",
    "parse_bban",
    "parse_iban",
    "validate_bban",
    "validate_iban",
    "ReferenceFormat",
    "RfDetails",
    "format_ogm",
    "generate_ogm",
    "generate_rf",
    "parse_rf",
    "validate_ogm",
    "validate_payment_reference",
    "validate_rf",
    "CusipDetails",
    "IsinDetails",
    "LeiDetails",
    "SedolDetails",
    "generate_cusip",
    "generate_isin",
    "generate_sedol",
    "parse_cusip",
    "parse_isin",
    "parse_lei",
    "parse_sedol",
    "validate_cusip",
    "validate_isin",
    "validate_lei",
    "validate_sedol",
]
