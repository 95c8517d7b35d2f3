import pytest

from bonami.errors import BonAmiError, ErrorCode


def test_integer_code_is_converted():
    err = BonAmiError(-5, "missing")
    assert err.code is ErrorCode.NOTFOUND
    assert err.message == "missing"


def test_default_message_uses_description():
    err = BonAmiError(ErrorCode.TIMEOUT)
    assert err.message == "Operation timed out"
    assert str(err) == "Operation timed out (TIMEOUT)"


def test_custom_message_in_str():
    err = BonAmiError(ErrorCode.BADPORT, "port 0 rejected")
    assert str(err).startswith("port 0 rejected")
    assert "BADPORT" in str(err)


def test_unknown_code_rejected():
    with pytest.raises(ValueError):
        BonAmiError(99)


def test_ok_is_not_an_error():
    with pytest.raises(ValueError):
        BonAmiError(ErrorCode.OK)


def test_description_of_badparam():
    err = BonAmiError(ErrorCode.BADPARAM)
    assert err.message == "Invalid parameter"


def test_every_error_code_has_default_message():
    messages = [BonAmiError(code).message for code in ErrorCode if code is not ErrorCode.OK]
    assert messages
    assert all(messages)


def test_error_carries_code_and_message():
    err = BonAmiError(ErrorCode.DUPLICATE)
    assert err.code == ErrorCode.DUPLICATE
    assert err.message == "Service already registered"
    assert str(err) == "Service already registered (DUPLICATE)"