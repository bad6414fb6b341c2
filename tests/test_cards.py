from datetime import date

import pytest

from finident.engine.validator import IdentifierValidator
from finident.errors import ErrorCode
from finident.identifiers.cards import (
    CardBrand,
    card_brand,
    parse_card_number,
    validate_card_number,
    validate_cvv,
    validate_expiration,
)

TODAY = date(2026, 10, 19)


@pytest.mark.parametrize(
    "number, brand",
    [
        ("4111111111111111", CardBrand.VISA),
        ("5555555555554444", CardBrand.MASTERCARD),
        ("2221000000000009", CardBrand.MASTERCARD),
        ("378282246310005", CardBrand.AMERICAN_EXPRESS),
        ("6011111111111117", CardBrand.DISCOVER),
        ("3530111333300000", CardBrand.JCB),
        ("30569309025904", CardBrand.DINERS_CLUB),
        ("6200000000000005", CardBrand.CHINA_UNIONPAY),
    ],
)
def test_known_test_numbers(number, brand):
    assert validate_card_number(number).is_valid
    assert card_brand(number) == brand


@pytest.mark.parametrize(
    "prefix, brand",
    [
        ("2200", CardBrand.MIR),
        ("6221260000", CardBrand.DISCOVER),
        ("6450", CardBrand.DISCOVER),
        ("5061000000", CardBrand.VERVE),
        ("6071", CardBrand.RUPAY),
        ("6759", CardBrand.MAESTRO),
        ("5000", CardBrand.MAESTRO),
        ("9792", CardBrand.TROY),
        ("1234", CardBrand.UNKNOWN),
    ],
)
def test_brand_ranges(prefix, brand):
    assert card_brand(prefix.ljust(16, "0")) == brand


def test_brand_of_garbage_is_unknown():
    assert card_brand(None) == CardBrand.UNKNOWN
    assert card_brand("4111") == CardBrand.UNKNOWN
    assert card_brand("4111-1111-1111-111X") == CardBrand.UNKNOWN


def test_card_number_failures():
    assert validate_card_number("4111111111111112").error_code == ErrorCode.INVALID_CHECKSUM
    r = validate_card_number("41111111111")
    assert r.error_code == ErrorCode.INVALID_LENGTH
    assert r.details["expected"] == list(range(12, 20))
    assert validate_card_number("4111 1111 1111 111A").details["field"] == "number"
    assert validate_card_number("4111.1111.1111.1111").error_code == ErrorCode.INVALID_FORMAT
    assert validate_card_number("").error_code == ErrorCode.INVALID_INPUT
    assert validate_card_number("4111111111111111", IdentifierValidator(10)).error_code == ErrorCode.INVALID_LENGTH


def test_parse_card_number():
    d = parse_card_number("4111-1111-1111-1111")
    assert d.number == "4111111111111111"
    assert d.brand == CardBrand.VISA
    assert d.issuer_identification == "411111"
    assert d.last_four == "1111"
    assert d.masked == "************1111"
    assert parse_card_number("4111111111111112") is None


def test_cvv():
    assert validate_cvv("123", CardBrand.VISA).is_valid
    assert validate_cvv("1234", CardBrand.AMERICAN_EXPRESS).is_valid
    assert validate_cvv("1234").is_valid
    r = validate_cvv("123", CardBrand.AMERICAN_EXPRESS)
    assert r.error_code == ErrorCode.INVALID_LENGTH
    assert r.details == {"expected": [4], "actual": 3}
    assert validate_cvv("12a", CardBrand.VISA).error_code == ErrorCode.INVALID_FORMAT
    assert validate_cvv(" ", CardBrand.VISA).error_code == ErrorCode.INVALID_INPUT


def test_expiration():
    assert validate_expiration(10, 2026, TODAY).is_valid
    assert validate_expiration(1, 27, TODAY).is_valid
    assert validate_expiration(12, 2046, TODAY).is_valid
    assert validate_expiration(9, 2026, TODAY).details["field"] == "year"
    assert validate_expiration(1, 2047, TODAY).error_code == ErrorCode.INVALID_FORMAT
    r = validate_expiration(13, 2027, TODAY)
    assert r.error_code == ErrorCode.INVALID_FORMAT
    assert r.details["field"] == "month"
