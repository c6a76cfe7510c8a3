import pytest

from appkit.config.errors import (
    ComparisonError,
    ConfigEmptyError,
    FieldInvalidError,
    FieldRequiredError,
    ParserError,
    RuleError,
    wrap_field_error,
)


def test_config_empty_message():
    assert str(ConfigEmptyError()) == "you must provide a configuration"


def test_empty_field_errors_have_empty_message():
    assert str(FieldRequiredError()) == ""
    assert str(FieldInvalidError()) == ""


def test_field_required_message():
    assert str(FieldRequiredError("Host", "string")) == 'field "Host" (string) is required'


def test_field_invalid_message_with_detail():
    err = FieldInvalidError("Port", "int", "too small")
    assert str(err) == 'field "Port" (int) is invalid: too small'
    assert err.field == "Port"
    assert err.type_name == "int"


def test_parser_error_without_rule():
    assert str(ParserError(None, "abc")) == 'invalid value "abc"'


def test_parser_error_with_rule():
    err = ParserError("min", "x")
    assert '"x"' in str(err)
    assert str(err).endswith("min")
    assert err.rule == "min"


def test_rule_error_joins_and_drops_missing():
    err = RuleError("min", [ValueError("a"), None, ValueError("b")])
    assert len(err.errors) == 2
    assert str(err) == "a; b"


def test_comparison_error_operation_text():
    err = ComparisonError(1, 2, "min")
    assert "greater than or equal to" in str(err)
    assert str(err).startswith("value = 1")


def test_comparison_error_quotes_strings():
    err = ComparisonError("a", "b", "lt")
    assert '"a"' in str(err)
    assert '"b"' in str(err)


def test_comparison_error_float_formatting():
    err = ComparisonError(25.5, 20.0, "lte")
    assert "25.5" in str(err)
    assert "20.0" not in str(err)


def test_comparison_error_unknown_operation():
    err = ComparisonError(1, 2, "zz")
    assert str(err).startswith("unknown operation")
    assert '"zz"' in str(err)


def test_wrap_none():
    assert wrap_field_error("Host", "string", None) is None


def test_wrap_required_sets_field():
    wrapped = wrap_field_error("Host", "string", FieldRequiredError())
    assert isinstance(wrapped, FieldRequiredError)
    assert (wrapped.field, wrapped.type_name, wrapped.message) == ("Host", "string", "")
    assert str(wrapped) == str(FieldRequiredError("Host", "string"))


def test_wrap_invalid_keeps_message():
    inner = FieldInvalidError("", "", "bad")
    wrapped = wrap_field_error("Port", "int", inner)
    assert isinstance(wrapped, FieldInvalidError)
    assert wrapped.message == str(inner)


def test_wrap_plain_error_unchanged():
    err = ValueError("plain")
    assert wrap_field_error("Port", "int", err) is err


def test_wrap_rule_error_takes_first():
    first = ComparisonError(1000, 1024, "gte")
    second = ComparisonError(1000, 10, "lte")
    err = RuleError("max", [RuleError("min", [first]), second])
    assert wrap_field_error("Port", "int", err) is first


def test_wrap_rule_error_with_required():
    err = RuleError("required", [FieldRequiredError()])
    wrapped = wrap_field_error("Host", "string", err)
    assert isinstance(wrapped, FieldRequiredError)
    assert wrapped.field == "Host"


def test_errors_are_value_errors():
    err = FieldRequiredError("Host", "string")
    assert isinstance(err, ValueError)
    assert err.field == "Host"
    with pytest.raises(ValueError, match="is required"):
        raise err