"""
Fixed-width structural layouts.

A layout is an ordered list of fields. Widths add up to the identifier's total
length and offsets run left to right with no gaps. Layouts are written compactly
in the rule packs, one token per field:

    "bank_code:3n"          3 digits
    "country_code:2a=BE"    2 letters, must equal "BE"
    "account:12c"           12 letters or digits
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from ..errors import RegistryError


class CharClass(str, Enum):
    DIGIT = "n"
    LETTER = "a"
    ALNUM = "c"

    def matches(self, text: str) -> bool:
        if self is CharClass.DIGIT:
            return all("0" <= ch <= "9" for ch in text)
        if self is CharClass.LETTER:
            return all("A" <= ch <= "Z" for ch in text)
        return all("0" <= ch <= "9" or "A" <= ch <= "Z" for ch in text)


_TOKEN = re.compile(
    r"^(?P<name>[a-z_][a-z0-9_]*):(?P<width>\d+)(?P<cls>[nac])(?:=(?P<literal>[A-Z0-9]+))?$"
)


@dataclass(frozen=True)
class Field:
    name: str
    width: int
    char_class: CharClass
    literal: Optional[str] = None

    @classmethod
    def parse(cls, token: str) -> "Field":
        m = _TOKEN.match(token.strip())
        if not m:
            raise RegistryError(f"malformed field token {token!r}")
        return cls(
            name=m.group("name"),
            width=int(m.group("width")),
            char_class=CharClass(m.group("cls")),
            literal=m.group("literal"),
        )


@dataclass(frozen=True)
class StructuralDescriptor:
    """
    Ordered fields describing one fixed-width layout.

    `country_field` names the field whose literal is the country prefix
    (e.g. "country_code" for IBAN, "prefix" for VAT numbers). A mismatch there
    is reported as InvalidCountryCode rather than InvalidFormat.
    """
    fields: Tuple[Field, ...]
    country_field: Optional[str] = None
    name: str = ""

    def __post_init__(self) -> None:
        if not self.fields:
            raise RegistryError("descriptor needs at least one field")
        seen = set()
        for f in self.fields:
            if f.name in seen:
                raise RegistryError(f"duplicate field name {f.name!r}")
            seen.add(f.name)
            if f.width <= 0:
                raise RegistryError(f"field {f.name!r} has non-positive width")
            if f.literal is not None and (
                len(f.literal) != f.width or not f.char_class.matches(f.literal)
            ):
                raise RegistryError(
                    f"literal {f.literal!r} does not fit field {f.name!r} "
                    f"({f.width}{f.char_class.value})"
                )
        if self.country_field is not None:
            cf = self.field(self.country_field)
            if cf is None or cf.literal is None:
                raise RegistryError(
                    f"country field {self.country_field!r} must exist and carry a literal"
                )

    @classmethod
    def from_tokens(
        cls,
        tokens: Iterable[str],
        country_field: Optional[str] = None,
        name: str = "",
    ) -> "StructuralDescriptor":
        return cls(tuple(Field.parse(t) for t in tokens), country_field, name)

    @property
    def length(self) -> int:
        return sum(f.width for f in self.fields)

    @property
    def offsets(self) -> Dict[str, Tuple[int, int]]:
        """Field name -> (start, end) into the canonical text."""
        out: Dict[str, Tuple[int, int]] = {}
        pos = 0
        for f in self.fields:
            out[f.name] = (pos, pos + f.width)
            pos += f.width
        return out

    def field(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def slice(self, text: str, name: str) -> str:
        start, end = self.offsets[name]
        return text[start:end]

    @property
    def country_prefix(self) -> Optional[Tuple[int, int, str]]:
        """(start, end, literal) of the country field, if any."""
        if self.country_field is None:
            return None
        start, end = self.offsets[self.country_field]
        literal = self.field(self.country_field).literal
        return start, end, literal
