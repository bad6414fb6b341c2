import random

import pytest

from finident.engine.descriptor import CharClass
from finident.engine.loader import get_registry
from finident.errors import ErrorCode
from finident.identifiers.iban import (
    build_iban,
    compute_iban_check_digits,
    format_iban,
    parse_bban,
    parse_iban,
    validate_bban,
    validate_iban,
)

GOLDEN = [
    "BE68539007547034",
    "DE89370400440532013000",
    "GB29NWBK60161331926819",
    "FR1420041010050500013M02606",
    "NL91ABNA0417164300",
    "ES9121000418450200051332",
    "CH9300762011623852957",
    "NO9386011117947",
    "MT84MALT011000012345MTLCAST001S",
    "IT60X0542811101000000123456",
    "BR1800360305000010009795493C1",
    "FI2112345600000785",
]

_CHARS = {
    CharClass.DIGIT: "0123456789",
    CharClass.LETTER: "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    CharClass.ALNUM: "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ",
}


@pytest.mark.parametrize("iban", GOLDEN)
def test_golden_ibans(iban):
    assert validate_iban(iban).is_valid
    assert validate_iban(format_iban(iban).lower()).is_valid


def test_last_digit_flip():
    r = validate_iban("BE68539007547035")
    assert r.error_code == ErrorCode.INVALID_CHECKSUM


def test_parse_details():
    d = parse_iban("GB29 NWBK 6016 1331 9268 19")
    assert d.country_code == "GB"
    assert d.check_digits == "29"
    assert d.bban == "NWBK60161331926819"
    assert d.bank_code == "NWBK"
    assert d.branch_code == "601613"
    assert d.account_number == "31926819"
    assert d.formatted == "GB29 NWBK 6016 1331 9268 19"


def test_parse_spanish_national_check():
    d = parse_iban("ES9121000418450200051332")
    assert d.national_check == "45"
    assert d.fields["bank_check"] == "4"


def test_parse_invalid_returns_none():
    assert parse_iban("BE68539007547035") is None
    assert parse_iban("") is None
    assert parse_iban("12345") is None


def test_unsupported_and_malformed_countries():
    assert validate_iban("ZZ0000000000").error_code == ErrorCode.UNSUPPORTED_COUNTRY
    assert validate_iban("1268539007547034").error_code == ErrorCode.INVALID_COUNTRY_CODE
    assert validate_iban("B").error_code == ErrorCode.INVALID_COUNTRY_CODE


def test_wrong_length_and_format():
    r = validate_iban("BE6853900754703")
    assert r.error_code == ErrorCode.INVALID_LENGTH
    assert r.details == {"expected": 16, "actual": 15}
    assert validate_iban("BE68-5390-0754-7034").error_code == ErrorCode.INVALID_FORMAT
    assert validate_iban("BEXX539007547034").error_code == ErrorCode.INVALID_FORMAT
    assert validate_iban(None).error_code == ErrorCode.INVALID_INPUT
    assert validate_iban("BE" + "0" * 70).error_code == ErrorCode.INVALID_LENGTH


def test_check_digit_helpers():
    assert compute_iban_check_digits("BE", "539007547034") == "68"
    assert compute_iban_check_digits("de", "370400440532013000") == "89"
    assert build_iban("GB", "NWBK 6016 1331 9268 19") == "GB29NWBK60161331926819"
    with pytest.raises(ValueError):
        build_iban("BE", "53900754703")
    with pytest.raises(ValueError):
        build_iban("ZZ", "1234")
    with pytest.raises(ValueError):
        compute_iban_check_digits("B1", "1234")


def test_format_iban():
    assert format_iban("be68539007547034") == "BE68 5390 0754 7034"
    assert format_iban("") == ""
    assert format_iban(None) == ""


def test_round_trip_every_country():
    rng = random.Random(13616)
    reg = get_registry("iban")
    for entry in reg:
        layout = entry.layouts[0]
        bban = "".join(
            "".join(rng.choice(_CHARS[f.char_class]) for _ in range(f.width))
            for f in layout.fields[2:]
        )
        iban = build_iban(entry.country_code, bban)
        assert validate_iban(iban).is_valid, iban
        assert len(iban) == layout.length

        flipped = iban[:3] + str((int(iban[3]) + 1) % 10) + iban[4:]
        assert validate_iban(flipped).error_code == ErrorCode.INVALID_CHECKSUM, flipped


@pytest.mark.parametrize(
    "country, bban",
    [
        ("BE", "539007547034"),
        ("ES", "21000418450200051332"),
        ("NO", "86011117947"),
        ("FI", "12345600000785"),
        ("DE", "370400440532013000"),
        ("FR", "20041010050500013M02606"),
        ("IT", "X0542811101000000123456"),
        ("SM", "U0322509800000000270100"),
        ("PT", "000201231234567890154"),
        ("EE", "2200221020145685"),
        ("IS", "0159260076545510730339"),
        ("SK", "12000000198742637541"),
    ],
)
def test_bban_national_checks(country, bban):
    assert validate_bban(country, bban).is_valid


@pytest.mark.parametrize(
    "country, bban",
    [
        ("BE", "539007547035"),
        ("ES", "21000418550200051332"),
        ("NO", "86011117948"),
        ("FI", "12345600000786"),
        ("FR", "20041010050500013M02607"),
        ("IT", "Y0542811101000000123456"),
        ("SM", "V0322509800000000270100"),
        ("PT", "000201231234567890155"),
        ("EE", "2200221020145686"),
        ("IS", "0159260076545510730349"),
        ("SK", "12000000198742637542"),
    ],
)
def test_bban_national_checks_fail(country, bban):
    assert validate_bban(country, bban).error_code == ErrorCode.INVALID_CHECKSUM


def test_iban_ignores_national_check():
    # valid ISO check digits around a Belgian BBAN with a wrong national check
    iban = build_iban("BE", "539007547035")
    assert validate_iban(iban).is_valid
    assert not validate_bban("BE", iban[4:]).is_valid


def test_parse_bban():
    d = parse_bban("BE", "539-0075470-34".replace("-", ""))
    assert d.kind == "bban"
    assert d["bank_code"] == "539"
    assert d["national_check"] == "34"


def test_french_rib_key_counts_letters():
    d = parse_bban("FR", "20041010050500013M02606")
    assert d["account_number"] == "0500013M026"
    assert d["national_check"] == "06"
    # same account with the letter replaced by its RIB value (M -> 4)
    assert validate_bban("FR", "200410100505000134026" + "06").is_valid


def test_italian_cin_is_a_letter():
    d = parse_bban("IT", "X0542811101000000123456")
    assert d["national_check"] == "X"
    r = validate_bban("IT", "10542811101000000123456")
    assert r.error_code == ErrorCode.INVALID_FORMAT
    assert r.details["field"] == "national_check"
