import pytest

from finident.checksum.weighted import CheckDigitRule
from finident.engine.descriptor import StructuralDescriptor
from finident.engine.specs import Mod97Check, Mod97Iban, NoChecksum
from finident.engine.validator import IdentifierValidator
from finident.errors import ErrorCode


@pytest.fixture
def validator():
    return IdentifierValidator()


@pytest.fixture
def belgian_iban():
    return StructuralDescriptor.from_tokens(
        ["country_code:2a=BE", "check_digits:2n", "bank_code:3n", "account_number:7n", "national_check:2n"],
        country_field="country_code",
    )


def test_valid(validator, belgian_iban):
    outcome = validator.check("be68 5390 0754 7034", [belgian_iban], Mod97Iban())
    assert outcome.result.is_valid
    assert outcome.text == "BE68539007547034"
    assert outcome.descriptor is belgian_iban


def test_last_digit_flip_is_checksum_error(validator, belgian_iban):
    r = validator.validate("BE68539007547035", [belgian_iban], Mod97Iban())
    assert r.error_code == ErrorCode.INVALID_CHECKSUM


def test_length_mismatch_reports_expected_and_actual(validator):
    d = StructuralDescriptor.from_tokens(["number:20n"])
    r = validator.validate("1" * 21, [d], NoChecksum())
    assert r.error_code == ErrorCode.INVALID_LENGTH
    assert r.details == {"expected": 20, "actual": 21}
    assert "20" in r.message and "21" in r.message


def test_country_prefix_checked_before_length(validator, belgian_iban):
    r = validator.validate("DE89370400440532013000", [belgian_iban], Mod97Iban())
    assert r.error_code == ErrorCode.INVALID_COUNTRY_CODE


def test_field_class_names_field(validator, belgian_iban):
    r = validator.validate("BE6853A007547034", [belgian_iban], Mod97Iban())
    assert r.error_code == ErrorCode.INVALID_FORMAT
    assert r.details["field"] == "bank_code"


def test_non_country_literal_is_format_error(validator):
    d = StructuralDescriptor.from_tokens(["number:3n", "suffix:3a=MVA"])
    r = validator.validate("123ABC", [d], NoChecksum())
    assert r.error_code == ErrorCode.INVALID_FORMAT
    assert r.details["field"] == "suffix"


def test_input_cap(validator):
    d = StructuralDescriptor.from_tokens(["number:5n"])
    r = validator.validate("1" * 65, [d], NoChecksum())
    assert r.error_code == ErrorCode.INVALID_LENGTH
    assert r.details == {"max": 64, "actual": 65}
    assert IdentifierValidator(max_input_length=4).validate("12345", [d], NoChecksum()).error_code == ErrorCode.INVALID_LENGTH


def test_invalid_input(validator):
    d = StructuralDescriptor.from_tokens(["number:5n"])
    assert validator.validate(None, [d], NoChecksum()).error_code == ErrorCode.INVALID_INPUT
    assert validator.validate("   ", [d], NoChecksum()).error_code == ErrorCode.INVALID_INPUT


def test_variants_selected_by_length(validator):
    short = StructuralDescriptor.from_tokens(["bank:4a", "loc:2c"], name="short")
    long = StructuralDescriptor.from_tokens(["bank:4a", "loc:2c", "branch:3c"], name="long")
    assert validator.check("ABCD12", [short, long], NoChecksum()).descriptor is short
    assert validator.check("ABCD12XXX", [short, long], NoChecksum()).descriptor is long
    r = validator.validate("ABCD123", [short, long], NoChecksum())
    assert r.error_code == ErrorCode.INVALID_LENGTH
    assert r.details == {"expected": [6, 9], "actual": 7}


def test_mod97_check_remap(validator):
    d = StructuralDescriptor.from_tokens(["reference:10n", "check:2n"])
    spec = Mod97Check(("reference",), "check", CheckDigitRule(mode="remainder", remap={0: 97}))
    assert validator.validate("+++090/9337/55493+++", [d], spec, frozenset("+/")).is_valid
    assert validator.validate("000000000097", [d], spec).is_valid
    assert validator.validate("000000000000", [d], spec).error_code == ErrorCode.INVALID_CHECKSUM
