"""
YAML rule packs -> frozen country registries.

What this does
--------------
- Loads the built-in packs shipped under `finident/rulesets/` (and any extra
  pack files named in the config).
- Validates their shape with pydantic, turns layout tokens into
  `StructuralDescriptor`s and checksum blocks into `ChecksumSpec`s.
- Registers everything and freezes the registries.

A pack looks like this:

    kind: iban
    derived_kind: bban           # optional: same layouts without the header
    country_field: country_code
    header: ["country_code:2a={country}", "check_digits:2n"]
    checksum: {type: mod97_iban}
    countries:
      BE:
        name: Belgium
        length: 16
        layout: [bank_code:3n, account_number:7n, national_check:2n]
        national_check:
          type: mod97_check
          payload: [bank_code, account_number]
          check: national_check
          rule: {mode: remainder, remap: {0: 97}}

`length` is the full identifier length and is checked for single-layout
entries. Variable-length references are written once with `{n}` and a
`widths: {min, max}` range; `{length_digit}` is replaced by the last digit of
each expanded layout's total length (Swedish OCR).

Any problem in a pack is a RegistryError at build time.
"""

from __future__ import annotations

import threading
from importlib import resources
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from ..checksum.weighted import CheckDigitRule
from ..config import FinidentConfig
from ..errors import RegistryError
from .descriptor import StructuralDescriptor
from .registry import CountryRegistry
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
)
from .validator import IdentifierValidator

log = structlog.get_logger(__name__)

KINDS: Tuple[str, ...] = (
    "iban",
    "bban",
    "national_id",
    "vat",
    "bank_routing",
    "payment_reference",
)

# Config toggle -> built-in pack file.
_BUILTIN_PACKS: Dict[str, str] = {
    "iban": "iban.yaml",
    "national_id": "national_id.yaml",
    "vat": "vat.yaml",
    "bank_routing": "bank_routing.yaml",
    "payment_reference": "payment_reference.yaml",
}


# ---- Pack schema ---------------------------------------------------------------------------

class RuleModel(BaseModel):
    mode: Literal["complement", "remainder", "iso7064"] = "complement"
    remap: Dict[int, int] = Field(default_factory=dict)
    reject: List[int] = Field(default_factory=list)
    alphabet: Optional[str] = None
    fold: Literal["none", "digit_sum", "last_digit"] = "none"
    from_right: bool = False
    letters: Optional[str] = None

    def to_rule(self) -> CheckDigitRule:
        try:
            return CheckDigitRule(
                mode=self.mode,
                remap=self.remap,
                reject=frozenset(self.reject),
                alphabet=self.alphabet,
                fold=self.fold,
                from_right=self.from_right,
                letters=self.letters,
            )
        except ValueError as e:
            raise RegistryError(str(e)) from e


class ChecksumModel(BaseModel):
    type: Literal[
        "none",
        "mod97_iban",
        "mod97_rf",
        "mod97_check",
        "luhn",
        "weighted",
        "iso7064_mod11_10",
        "odd_even_mod26",
        "all_of",
        "any_of",
    ]
    payload: List[str] = Field(default_factory=list)
    check: Optional[str] = None
    weights: List[int] = Field(default_factory=list)
    modulus: int = 11
    shift: int = 0
    letters: Optional[str] = None
    rule: RuleModel = Field(default_factory=RuleModel)
    fallback_weights: Optional[List[int]] = None
    fallback_on: int = 10
    fields: List[str] = Field(default_factory=list)
    parts: List["ChecksumModel"] = Field(default_factory=list)

    def to_spec(self) -> ChecksumSpec:
        t = self.type
        if t == "none":
            return NoChecksum()
        if t == "mod97_iban":
            return Mod97Iban()
        if t == "mod97_rf":
            return Mod97Rf()
        if t == "mod97_check":
            return Mod97Check(
                tuple(self.payload), self._need_check(), self.rule.to_rule(), self.shift
            )
        if t == "luhn":
            return Luhn(tuple(self.weights or (1, 2)), tuple(self.fields), self.letters)
        if t == "weighted":
            return WeightedMod11(
                weights=tuple(self.weights),
                payload=tuple(self.payload),
                check=self.check,
                modulus=self.modulus,
                rule=self.rule.to_rule(),
                fallback_weights=tuple(self.fallback_weights) if self.fallback_weights else None,
                fallback_on=self.fallback_on,
            )
        if t == "iso7064_mod11_10":
            return Iso7064Mod11_10(tuple(self.payload), self._need_check())
        if t == "odd_even_mod26":
            return OddEvenMod26(tuple(self.payload), self._need_check())
        parts = tuple(p.to_spec() for p in self.parts)
        return AnyOf(parts) if t == "any_of" else AllOf(parts)

    def _need_check(self) -> str:
        if not self.check:
            raise RegistryError(f"checksum type {self.type!r} needs a 'check' field")
        return self.check


ChecksumModel.model_rebuild()


class WidthRange(BaseModel):
    min: int = Field(ge=1)
    max: int = Field(ge=1)

    @model_validator(mode="after")
    def _ordered(self) -> "WidthRange":
        if self.max < self.min:
            raise ValueError(f"widths: max {self.max} is below min {self.min}")
        return self


class CountryModel(BaseModel):
    name: str = ""
    length: Optional[int] = None
    layout: List[str] = Field(default_factory=list)
    variants: List[List[str]] = Field(default_factory=list)
    widths: Optional[WidthRange] = None
    checksum: Optional[ChecksumModel] = None
    national_check: Optional[ChecksumModel] = None
    strip: Optional[str] = None


class PackModel(BaseModel):
    kind: str
    derived_kind: Optional[str] = None
    strip: str = ""
    header: List[str] = Field(default_factory=list)
    country_field: Optional[str] = None
    checksum: Optional[ChecksumModel] = None
    countries: Dict[str, CountryModel] = Field(default_factory=dict)


# ---- Loading -------------------------------------------------------------------------------

def load_pack(text: str, source: str = "<string>") -> PackModel:
    try:
        data = yaml.safe_load(text) or {}
        return PackModel(**data)
    except (yaml.YAMLError, ValidationError, TypeError) as e:
        raise RegistryError(f"invalid rule pack {source}: {e}") from e


def _builtin_text(fname: str) -> str:
    return resources.files("finident.rulesets").joinpath(fname).read_text()


def _expand(body: List[str], widths: Optional[WidthRange]) -> List[List[str]]:
    """One token list per width when the layout is written with `{n}`."""
    if widths is None:
        return [list(body)]
    return [[t.replace("{n}", str(n)) for t in body] for n in range(widths.min, widths.max + 1)]


def _with_length_digit(tokens: List[str], name: str) -> List[str]:
    """Fill `{length_digit}` with the last digit of the total length."""
    if not any("{length_digit}" in t for t in tokens):
        return tokens
    sized = StructuralDescriptor.from_tokens([t.replace("{length_digit}", "0") for t in tokens], name=name)
    digit = str(sized.length % 10)
    return [t.replace("{length_digit}", digit) for t in tokens]


def _layouts(
    pack: PackModel, code: str, country: CountryModel, with_header: bool
) -> List[StructuralDescriptor]:
    bodies = country.variants or [country.layout]
    if not bodies or not bodies[0]:
        raise RegistryError(f"{pack.kind}/{code}: no layout")
    bodies = [expanded for body in bodies for expanded in _expand(body, country.widths)]

    out = []
    for i, body in enumerate(bodies):
        tokens = (pack.header if with_header else []) + list(body)
        tokens = [t.replace("{country}", code) for t in tokens]
        name = f"{pack.kind}:{code}" if len(bodies) == 1 else f"{pack.kind}:{code}:{i}"
        d = StructuralDescriptor.from_tokens(
            _with_length_digit(tokens, name), pack.country_field if with_header else None, name
        )
        out.append(d)

    # `length` is the full identifier; derived layouts drop the header.
    if (
        with_header
        and country.length is not None
        and len(out) == 1
        and out[0].length != country.length
    ):
        raise RegistryError(
            f"{pack.kind}/{code}: declared length {country.length} "
            f"but fields add up to {out[0].length}"
        )
    return out


def _strip(pack: PackModel, country: CountryModel) -> frozenset:
    return frozenset(country.strip if country.strip is not None else pack.strip)


def register_pack(
    pack: PackModel,
    registries: Dict[str, CountryRegistry],
    validator: IdentifierValidator,
) -> None:
    """Register every country of `pack` into `registries` (created on demand)."""
    main = registries.setdefault(pack.kind, CountryRegistry(pack.kind, validator))
    derived = None
    if pack.derived_kind:
        derived = registries.setdefault(
            pack.derived_kind, CountryRegistry(pack.derived_kind, validator)
        )

    for code, country in pack.countries.items():
        model = country.checksum or pack.checksum
        spec = model.to_spec() if model else NoChecksum()
        main.register(
            code,
            _layouts(pack, code, country, with_header=True),
            spec,
            strip_set=_strip(pack, country),
            name=country.name,
        )
        if derived is not None:
            national = country.national_check.to_spec() if country.national_check else NoChecksum()
            derived.register(
                code,
                _layouts(pack, code, country, with_header=False),
                national,
                strip_set=_strip(pack, country),
                name=country.name,
            )


def build_registries(cfg: Optional[FinidentConfig] = None) -> Dict[str, CountryRegistry]:
    """Build and freeze one registry per identifier kind enabled in `cfg`."""
    cfg = cfg or FinidentConfig()
    validator = IdentifierValidator(max_input_length=cfg.limits.max_input_length)

    sources: List[Tuple[str, str]] = []
    for toggle, fname in _BUILTIN_PACKS.items():
        if getattr(cfg.packs, toggle):
            sources.append((fname, _builtin_text(fname)))
    for path in cfg.packs.extra:
        sources.append((str(path), Path(path).read_text()))

    registries: Dict[str, CountryRegistry] = {}
    for source, text in sources:
        register_pack(load_pack(text, source), registries, validator)

    for kind, reg in registries.items():
        reg.freeze()
        log.info("registry_built", kind=kind, countries=len(reg))
    return registries


# ---- Process-wide default registries --------------------------------------------------------

_default: Optional[Dict[str, CountryRegistry]] = None
_lock = threading.Lock()


def default_registries() -> Dict[str, CountryRegistry]:
    """Built-in registries, built once on first use."""
    global _default
    if _default is None:
        with _lock:
            if _default is None:
                _default = build_registries()
    return _default


def get_registry(kind: str) -> CountryRegistry:
    registries = default_registries()
    if kind not in registries:
        raise RegistryError(
            f"unknown identifier kind {kind!r}; expected one of {', '.join(sorted(registries))}"
        )
    return registries[kind]
