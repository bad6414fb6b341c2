"""
Country code -> (layouts, checksum spec, separators) dispatch.

One registry exists per identifier kind ("iban", "vat", ...). Registries are
filled once and then frozen; after that every operation is a dict lookup and
needs no locking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import AbstractSet, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import structlog

from ..errors import ErrorCode, RegistryError, ValidationResult
from .descriptor import StructuralDescriptor
from .parser import IdentifierParser, ParsedDetails
from .specs import ChecksumSpec, check_spec
from .validator import IdentifierValidator, Outcome

log = structlog.get_logger(__name__)

_COUNTRY = re.compile(r"^[A-Za-z]{2}$")


@dataclass(frozen=True)
class RegistryEntry:
    country_code: str
    layouts: Tuple[StructuralDescriptor, ...]
    checksum: ChecksumSpec
    strip_set: AbstractSet[str] = frozenset()
    name: str = ""

    @property
    def lengths(self) -> Tuple[int, ...]:
        return tuple(d.length for d in self.layouts)


class CountryRegistry:
    """
    Registry of per-country rules for one identifier kind.

    >>> reg.validate("BE", "BE68 5390 0754 7034").is_valid
    True
    """

    def __init__(self, kind: str, validator: Optional[IdentifierValidator] = None) -> None:
        self.kind = kind
        self.validator = validator or IdentifierValidator()
        self._parser = IdentifierParser(kind)
        self._entries: Dict[str, RegistryEntry] = {}
        self._frozen = False

    # -- Registration --------------------------------------------------------------------

    def register(
        self,
        country_code: str,
        descriptor: Union[StructuralDescriptor, Sequence[StructuralDescriptor]],
        checksum: ChecksumSpec,
        *,
        strip_set: Optional[AbstractSet[str]] = None,
        name: str = "",
    ) -> RegistryEntry:
        if self._frozen:
            raise RegistryError(f"{self.kind} registry is frozen")
        if not isinstance(country_code, str) or not _COUNTRY.fullmatch(country_code):
            raise RegistryError(f"country code must be two letters, got {country_code!r}")
        code = country_code.upper()
        if code in self._entries:
            raise RegistryError(f"{self.kind}: {code} is already registered")

        layouts = (descriptor,) if isinstance(descriptor, StructuralDescriptor) else tuple(descriptor)
        if not layouts:
            raise RegistryError(f"{self.kind}/{code}: at least one layout is required")
        lengths = [d.length for d in layouts]
        if len(set(lengths)) != len(lengths):
            raise RegistryError(f"{self.kind}/{code}: layout variants must differ in length")
        if len({d.country_prefix for d in layouts}) != 1:
            raise RegistryError(f"{self.kind}/{code}: layout variants disagree on the country prefix")
        for d in layouts:
            check_spec(checksum, d)

        entry = RegistryEntry(
            country_code=code,
            layouts=layouts,
            checksum=checksum,
            strip_set=frozenset(strip_set or ()),
            name=name,
        )
        self._entries[code] = entry
        return entry

    def freeze(self) -> "CountryRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Lookup --------------------------------------------------------------------------

    def entry(self, country_code: str) -> Optional[RegistryEntry]:
        if not isinstance(country_code, str):
            return None
        return self._entries.get(country_code.upper())

    def countries(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, country_code: object) -> bool:
        return isinstance(country_code, str) and country_code.upper() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self._entries[c] for c in self.countries())

    # -- Validation / parsing ------------------------------------------------------------

    def _outcome(self, country_code: str, raw: Optional[str]) -> Outcome:
        if not isinstance(country_code, str) or not _COUNTRY.fullmatch(country_code):
            return Outcome(
                ValidationResult.failure(ErrorCode.INVALID_COUNTRY_CODE, country=country_code)
            )
        entry = self._entries.get(country_code.upper())
        if entry is None:
            return Outcome(
                ValidationResult.failure(
                    ErrorCode.UNSUPPORTED_COUNTRY, country=country_code.upper(), kind=self.kind
                )
            )
        outcome = self.validator.check(raw, entry.layouts, entry.checksum, entry.strip_set)
        if not outcome.result.is_valid:
            # Never log the submitted value.
            log.debug(
                "identifier_rejected",
                kind=self.kind,
                country=entry.country_code,
                error=outcome.result.error_code.value,
            )
        return outcome

    def validate(self, country_code: str, raw: Optional[str]) -> ValidationResult:
        return self._outcome(country_code, raw).result

    def parse(self, country_code: str, raw: Optional[str]) -> Optional[ParsedDetails]:
        """Validate, then slice into fields; None whenever validation fails."""
        outcome = self._outcome(country_code, raw)
        if not outcome.result.is_valid:
            return None
        return self._parser.parse(outcome.text, outcome.descriptor, country_code.upper())
