import pytest

from finident.engine.loader import get_registry
from finident.errors import ErrorCode


@pytest.fixture
def registry():
    return get_registry("bank_routing")


@pytest.mark.parametrize(
    "country, number",
    [
        ("US", "021000021"),
        ("US", "011000015"),
        ("MX", "032180000118359719"),
        ("AR", "2850590940090418135201"),
    ],
)
def test_valid(registry, country, number):
    assert registry.validate(country, number).is_valid


@pytest.mark.parametrize(
    "country, number",
    [
        ("US", "021000022"),
        ("MX", "032180000118359710"),
        ("AR", "2850590840090418135201"),
        ("AR", "2850590940090418135202"),
    ],
)
def test_invalid(registry, country, number):
    assert registry.validate(country, number).error_code == ErrorCode.INVALID_CHECKSUM


def test_parse_clabe(registry):
    d = registry.parse("MX", "032 180 00011835971 9")
    assert d["bank_code"] == "032"
    assert d["branch_code"] == "180"
    assert d["account_number"] == "00011835971"
    assert d["check"] == "9"
