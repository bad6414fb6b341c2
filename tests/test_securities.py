import pytest

from finident.engine.validator import IdentifierValidator
from finident.errors import ErrorCode
from finident.identifiers.securities import (
    generate_cusip,
    generate_isin,
    generate_sedol,
    parse_cusip,
    parse_isin,
    parse_lei,
    parse_sedol,
    validate_cusip,
    validate_isin,
    validate_lei,
    validate_sedol,
)


@pytest.mark.parametrize("isin", ["US0378331005", "us 0378 3310 05", "GB0002634946", "US-037833100-5"])
def test_valid_isins(isin):
    assert validate_isin(isin).is_valid


def test_isin_failures():
    assert validate_isin("US0378331006").error_code == ErrorCode.INVALID_CHECKSUM
    assert validate_isin("US037833100").error_code == ErrorCode.INVALID_LENGTH
    r = validate_isin("1S0378331005")
    assert r.error_code == ErrorCode.INVALID_FORMAT
    assert r.details["field"] == "country_code"
    assert validate_isin(None).error_code == ErrorCode.INVALID_INPUT


def test_parse_isin():
    d = parse_isin("US0378331005")
    assert (d.country_code, d.nsin, d.check_digit) == ("US", "037833100", "5")
    assert parse_isin("US0378331006") is None


def test_generate_isin():
    assert generate_isin("US", "037833100") == "US0378331005"
    assert generate_isin("gb", "000263494") == "GB0002634946"
    with pytest.raises(ValueError):
        generate_isin("U1", "037833100")
    with pytest.raises(ValueError):
        generate_isin("US", "0378331")


@pytest.mark.parametrize("cusip", ["037833100", "38259P508"])
def test_valid_cusips(cusip):
    assert validate_cusip(cusip).is_valid


def test_cusip():
    assert validate_cusip("037833101").error_code == ErrorCode.INVALID_CHECKSUM
    assert validate_cusip("03783310").error_code == ErrorCode.INVALID_LENGTH
    assert validate_cusip("03783310A").details["field"] == "check_digit"
    d = parse_cusip("38259P508")
    assert (d.issuer_number, d.issue_number, d.check_digit) == ("38259P", "50", "8")
    assert generate_cusip("38259P", "50") == "38259P508"
    with pytest.raises(ValueError):
        generate_cusip("38259", "50")


@pytest.mark.parametrize("sedol", ["0263494", "B0YBKJ7"])
def test_valid_sedols(sedol):
    assert validate_sedol(sedol).is_valid


def test_sedol_rejects_vowels():
    r = validate_sedol("A0YBKJ7")
    assert r.error_code == ErrorCode.INVALID_FORMAT
    assert r.details["field"] == "base_code"
    with pytest.raises(ValueError):
        generate_sedol("A0YBKJ")


def test_sedol():
    assert validate_sedol("0263495").error_code == ErrorCode.INVALID_CHECKSUM
    d = parse_sedol("B0YBKJ7")
    assert (d.base_code, d.check_digit) == ("B0YBKJ", "7")
    assert generate_sedol("B0YBKJ") == "B0YBKJ7"
    assert generate_sedol("026349") == "0263494"


def test_lei():
    assert validate_lei("5493001KJTIIGC8Y1R12").is_valid
    assert validate_lei("5493001kjtiigc8y1r12").is_valid
    assert validate_lei("5493001KJTIIGC8Y1R13").error_code == ErrorCode.INVALID_CHECKSUM
    assert validate_lei("5493001KJTIIGC8Y1R1").error_code == ErrorCode.INVALID_LENGTH
    assert validate_lei("5493001KJTIIGC8Y1RAB").details["field"] == "check_digits"
    d = parse_lei("5493001KJTIIGC8Y1R12")
    assert (d.lou_prefix, d.entity, d.check_digits) == ("5493", "001KJTIIGC8Y1R", "12")


def test_input_cap():
    capped = IdentifierValidator(max_input_length=12)
    assert validate_isin("US0378331005", capped).is_valid
    assert validate_lei("5493001KJTIIGC8Y1R12", capped).error_code == ErrorCode.INVALID_LENGTH
