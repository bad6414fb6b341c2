import pytest

from finident.config import FinidentConfig, Packs
from finident.engine.loader import build_registries, load_pack, register_pack
from finident.engine.specs import AllOf, Mod97Check, NoChecksum, WeightedMod11
from finident.engine.validator import IdentifierValidator
from finident.errors import ErrorCode, RegistryError

PACK = """
kind: loyalty
strip: "-"
country_field: prefix
header: ["prefix:2a={country}"]
countries:
  XA:
    name: Example
    length: 7
    layout: [number:4n, check:1n]
    checksum:
      type: weighted
      weights: [1, 3]
      modulus: 10
      payload: [number]
      check: check
"""


def test_register_custom_pack():
    registries = {}
    register_pack(load_pack(PACK), registries, IdentifierValidator())
    reg = registries["loyalty"]
    # 1*1 + 2*3 + 3*1 + 4*3 = 22 -> 8
    assert reg.validate("XA", "XA-1234-8").is_valid
    assert reg.validate("XA", "XA12349").error_code == ErrorCode.INVALID_CHECKSUM
    assert reg.validate("XA", "XB12348").error_code == ErrorCode.INVALID_COUNTRY_CODE
    assert reg.entry("XA").name == "Example"


def test_declared_length_must_match_fields():
    with pytest.raises(RegistryError):
        register_pack(load_pack(PACK.replace("length: 7", "length: 8")), {}, IdentifierValidator())


def test_unknown_field_in_checksum():
    with pytest.raises(RegistryError):
        register_pack(load_pack(PACK.replace("payload: [number]", "payload: [nope]")), {}, IdentifierValidator())


@pytest.mark.parametrize("text", ["kind: [", "countries: {}", "kind: x\ncountries:\n  XA: {layout: 3}"])
def test_malformed_packs(text):
    with pytest.raises(RegistryError):
        load_pack(text)


def test_checksum_models_become_specs():
    pack = load_pack(
        """
kind: demo
countries:
  XA:
    layout: [a:2n, b:1n, c:2n]
    checksum:
      type: all_of
      parts:
        - {type: weighted, weights: [2], payload: [a], check: b, rule: {reject: [10]}}
        - {type: mod97_check, payload: [a, b], check: c, rule: {mode: remainder, remap: {0: 97}}}
"""
    )
    spec = pack.countries["XA"].checksum.to_spec()
    assert isinstance(spec, AllOf)
    weighted, mod97 = spec.parts
    assert isinstance(weighted, WeightedMod11)
    assert weighted.rule.reject == frozenset({10})
    assert isinstance(mod97, Mod97Check)
    assert dict(mod97.rule.remap) == {0: 97}
    assert hash(spec) == hash(pack.countries["XA"].checksum.to_spec())


def test_bban_registry_is_derived_from_iban_pack():
    registries = build_registries(FinidentConfig())
    iban = registries["iban"].entry("DE")
    bban = registries["bban"].entry("DE")
    assert iban.lengths == (22,)
    assert bban.lengths == (18,)
    assert isinstance(bban.checksum, NoChecksum)


def test_extra_packs(tmp_path):
    path = tmp_path / "loyalty.yaml"
    path.write_text(PACK)
    cfg = FinidentConfig(packs=Packs(iban=False, national_id=False, vat=False,
                                     bank_routing=False, payment_reference=False,
                                     extra=[path]))
    registries = build_registries(cfg)
    assert list(registries) == ["loyalty"]
    assert registries["loyalty"].frozen


def test_default_registries_build():
    registries = build_registries()
    assert set(registries) == {"iban", "bban", "national_id", "vat", "bank_routing", "payment_reference"}
    assert all(reg.frozen for reg in registries.values())
    assert registries["bban"].entry("BE").lengths == (12,)


def test_bban_length_mismatch_still_caught():
    text = """
kind: acct
derived_kind: acct_body
header: ["country:2a={country}"]
country_field: country
countries:
  XA:
    length: 6
    layout: [number:3n]
"""
    with pytest.raises(RegistryError):
        register_pack(load_pack(text), {}, IdentifierValidator())
    register_pack(load_pack(text.replace("length: 6", "length: 5")), {}, IdentifierValidator())


WIDTH_PACK = """
kind: ocr
countries:
  XA:
    widths: {min: 2, max: 4}
    layout: ["reference:{n}n", "length_digit:1n={length_digit}", check:1n]
    checksum: {type: luhn}
"""


def test_widths_expand_layouts():
    registries = {}
    register_pack(load_pack(WIDTH_PACK), registries, IdentifierValidator())
    entry = registries["ocr"].entry("XA")
    assert entry.lengths == (4, 5, 6)
    # "12" + length digit 4 + Luhn check 8
    assert registries["ocr"].validate("XA", "1248").is_valid
    r = registries["ocr"].validate("XA", "1258")
    assert r.error_code == ErrorCode.INVALID_FORMAT
    assert r.details["field"] == "length_digit"


def test_widths_must_be_ordered():
    with pytest.raises(RegistryError):
        load_pack(WIDTH_PACK.replace("{min: 2, max: 4}", "{min: 4, max: 2}"))


def test_unknown_letter_scheme():
    text = """
kind: demo
countries:
  XA:
    layout: [a:3c, b:1n]
    checksum: {type: weighted, weights: [1], modulus: 10, payload: [a], check: b, rule: {letters: klingon}}
"""
    with pytest.raises(RegistryError):
        register_pack(load_pack(text), {}, IdentifierValidator())
