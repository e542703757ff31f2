import pytest

from geotrack.env import get_bool, get_int, get_string

KEY = "GEOTRACK_TEST_VARIABLE"


@pytest.fixture(autouse=True)
def _clean(monkeypatch):
    monkeypatch.delenv(KEY, raising=False)


def test_get_string_fallback_when_unset():
    assert get_string(KEY, ":8004") == ":8004"


def test_get_string_returns_value(monkeypatch):
    monkeypatch.setenv(KEY, "localhost:9000")
    assert get_string(KEY, ":8004") == "localhost:9000"


def test_get_string_empty_value_is_kept(monkeypatch):
    monkeypatch.setenv(KEY, "")
    assert get_string(KEY, "default") == ""


def test_get_int_fallback_when_unset():
    assert get_int(KEY, 7) == 7


@pytest.mark.parametrize("raw, expected", [("42", 42), ("-13", -13), ("+5", 5), ("007", 7)])
def test_get_int_parses(monkeypatch, raw, expected):
    monkeypatch.setenv(KEY, raw)
    assert get_int(KEY, 0) == expected


@pytest.mark.parametrize("raw", ["", "abc", "1.5", " 3", "1_000", "99999999999999999999"])
def test_get_int_malformed_uses_fallback(monkeypatch, raw):
    monkeypatch.setenv(KEY, raw)
    assert get_int(KEY, 11) == 11


def test_get_bool_fallback_when_unset():
    assert get_bool(KEY, True) is True


@pytest.mark.parametrize("raw", ["1", "t", "T", "TRUE", "true", "True"])
def test_get_bool_true_words(monkeypatch, raw):
    monkeypatch.setenv(KEY, raw)
    assert get_bool(KEY, False) is True


@pytest.mark.parametrize("raw", ["0", "f", "F", "FALSE", "false", "False"])
def test_get_bool_false_words(monkeypatch, raw):
    monkeypatch.setenv(KEY, raw)
    assert get_bool(KEY, True) is False


@pytest.mark.parametrize("raw", ["yes", "no", "", "tRuE"])
def test_get_bool_malformed_uses_fallback(monkeypatch, raw):
    monkeypatch.setenv(KEY, raw)
    assert get_bool(KEY, True) is True
    assert get_bool(KEY, False) is False