"""
Slices validated canonical text into named fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .descriptor import StructuralDescriptor


@dataclass(frozen=True)
class ParsedDetails:
    """
    Read-only breakdown of a valid identifier.

    Fields are exposed as a read-only mapping and via item access:
    `details["bank_code"]`.
    """
    kind: str
    country_code: str
    value: str
    fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    layout: str = ""
    is_valid: bool = True

    def __getitem__(self, name: str) -> str:
        return self.fields[name]

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.fields.get(name, default)


class IdentifierParser:
    """Pure slicing; never called on text that failed validation."""

    def __init__(self, kind: str) -> None:
        self.kind = kind

    def parse(
        self, text: str, descriptor: StructuralDescriptor, country_code: str = ""
    ) -> ParsedDetails:
        if len(text) != descriptor.length:
            raise ValueError(
                f"text length {len(text)} does not match layout length {descriptor.length}"
            )
        fields = {name: text[start:end] for name, (start, end) in descriptor.offsets.items()}
        return ParsedDetails(
            kind=self.kind,
            country_code=country_code,
            value=text,
            fields=MappingProxyType(fields),
            layout=descriptor.name,
        )
