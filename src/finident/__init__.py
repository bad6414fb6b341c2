"""finident: checksum and structural validation for financial identifiers."""

__version__ = "0.1.0"

from .errors import ErrorCode, RegistryError, Result, ValidationResult
from .engine import CountryRegistry, ParsedDetails, StructuralDescriptor, get_registry
from .identifiers import (
    CardBrand,
    build_iban,
    card_brand,
    generate_ogm,
    generate_rf,
    parse_bic,
    parse_iban,
    parse_rf,
    validate_bban,
    validate_bic,
    validate_card_number,
    validate_cusip,
    validate_iban,
    validate_isin,
    validate_lei,
    validate_ogm,
    validate_payment_reference,
    validate_rf,
    validate_sedol,
)

__all__ = [
    "__version__",
    "ErrorCode",
    "RegistryError",
    "Result",
    "ValidationResult",
    "CountryRegistry",
    "ParsedDetails",
    "StructuralDescriptor",
    "get_registry",
    "CardBrand",
    "build_iban",
    "card_brand",
    "generate_ogm",
    "generate_rf",
    "parse_bic",
    "parse_iban",
    "parse_rf",
    "validate_bban",
    "validate_bic",
    "validate_card_number",
    "validate_cusip",
    "validate_iban",
    "validate_isin",
    "validate_lei",
    "validate_ogm",
    "validate_payment_reference",
    "validate_rf",
    "validate_sedol",
]
