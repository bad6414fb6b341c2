"""
Letter values for check digits computed over alphanumeric payloads.

    base36  A=10 ... Z=35            (ISIN, LEI, CUSIP, SEDOL)
    rib     A..I=1..9, J..R=1..9, S..Z=2..9   (French RIB key)
    nie     X=0, Y=1, Z=2            (Spanish foreigner numbers)

Digits always count as themselves.
"""

from __future__ import annotations

from string import ascii_uppercase
from types import MappingProxyType
from typing import List, Mapping, Optional

LETTER_VALUES: Mapping[str, Mapping[str, int]] = MappingProxyType(
    {
        "base36": MappingProxyType({c: i + 10 for i, c in enumerate(ascii_uppercase)}),
        "rib": MappingProxyType(dict(zip(ascii_uppercase, map(int, "12345678912345678923456789")))),
        "nie": MappingProxyType({"X": 0, "Y": 1, "Z": 2}),
    }
)


def letter_scheme(name: str) -> Mapping[str, int]:
    try:
        return LETTER_VALUES[name]
    except KeyError:
        raise ValueError(
            f"unknown letter scheme {name!r}; expected one of {', '.join(sorted(LETTER_VALUES))}"
        ) from None


def mappable(text: str, scheme: Optional[str]) -> bool:
    """True if every character of `text` has a value under `scheme`."""
    values = letter_scheme(scheme) if scheme else {}
    return all("0" <= ch <= "9" or ch in values for ch in text)


def char_values(text: str, scheme: Optional[str] = None) -> List[int]:
    """
    Numeric value of each character.

    Raises:
        ValueError: for an empty payload or a character the scheme does not map.
    """
    if not text:
        raise ValueError("expected a non-empty payload")
    values = letter_scheme(scheme) if scheme else {}
    out = []
    for ch in text:
        if "0" <= ch <= "9":
            out.append(ord(ch) - 48)
        elif ch in values:
            out.append(values[ch])
        else:
            raise ValueError(f"character {ch!r} has no value (letters={scheme!r}) in {text!r}")
    return out


def transliterate(text: str, scheme: Optional[str] = None) -> str:
    """Digit string with every letter replaced by its value ("US03" -> "302803")."""
    return "".join(str(v) for v in char_values(text, scheme))
