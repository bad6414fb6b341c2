"""Generic validation engine: layouts, checksum specs, validator, parser, registries."""

from .descriptor import CharClass, Field, StructuralDescriptor
from .loader import KINDS, build_registries, default_registries, get_registry, load_pack
from .parser import IdentifierParser, ParsedDetails
from .registry import CountryRegistry, RegistryEntry
from .specs import (
    AllOf,
    AnyOf,
    ChecksumSpec,
    Iso7064Mod11_10,
    Luhn,
    Mod97Check,
    Mod97Iban,
    Mod97Rf,
    NoChecksum,
    OddEvenMod26,
    WeightedMod11,
    check_spec,
    run_checksum,
)
from .validator import IdentifierValidator, Outcome

__all__ = [
    "CharClass",
    "Field",
    "StructuralDescriptor",
    "KINDS",
    "build_registries",
    "default_registries",
    "get_registry",
    "load_pack",
    "IdentifierParser",
    "ParsedDetails",
    "CountryRegistry",
    "RegistryEntry",
    "AllOf",
    "AnyOf",
    "ChecksumSpec",
    "Iso7064Mod11_10",
    "Luhn",
    "Mod97Check",
    "Mod97Iban",
    "Mod97Rf",
    "NoChecksum",
    "OddEvenMod26",
    "WeightedMod11",
    "check_spec",
    "run_checksum",
    "IdentifierValidator",
    "Outcome",
]
