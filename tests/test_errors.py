import pytest

from shedb.errors import (
    ExportDone,
    KeyEmptyError,
    RecordNotFoundError,
    StartAfterEndError,
    join,
)


def test_join_returns_none():
    assert join() is None
    assert join(None) is None
    assert join(None, None) is None


@pytest.mark.parametrize(
    "errs, want",
    [
        ([Exception("err1")], "err1"),
        ([Exception("err1"), Exception("err2")], "err1\nerr2"),
        ([Exception("err1"), None, Exception("err2")], "err1\nerr2"),
    ],
)
def test_join_error(errs, want):
    assert str(join(*errs)) == want


def test_join_keeps_errors_with_empty_message():
    joined = join(Exception(""), None)
    assert joined is not None
    assert str(joined) == ""


def test_join_skips_empty_messages():
    assert str(join(Exception(""), Exception("err2"))) == "err2"


def test_joined_error_can_be_raised():
    with pytest.raises(Exception) as excinfo:
        raise join(Exception("err1"), Exception("err2"))
    assert str(excinfo.value) == "err1\nerr2"


def test_error_messages():
    assert str(KeyEmptyError()) == "key empty"
    assert str(RecordNotFoundError()) == "record not found"
    assert str(StartAfterEndError()) == "start key after end key"
    assert str(ExportDone()) == "export is complete"


@pytest.mark.parametrize(
    "error_class, base, message",
    [
        (KeyEmptyError, ValueError, "key empty"),
        (RecordNotFoundError, KeyError, "record not found"),
        (StartAfterEndError, ValueError, "start key after end key"),
    ],
)
def test_error_hierarchy(error_class, base, message):
    err = error_class()
    assert isinstance(err, base)
    assert str(err) == message
    try:
        raise err
    except base as caught:
        assert caught is err
        assert str(caught) == message
    else:
        pytest.fail("error was not caught by its base class")