import pytest

from config import _flag


@pytest.mark.parametrize("raw, expected", [
    ("1", True),
    ("true", True),
    (" Yes ", True),
    ("on", True),
    ("0", False),
    ("false", False),
    ("off", False),
])
def test_flag_accepts_words_and_digits(monkeypatch, raw, expected):
    monkeypatch.setenv("BR_TEST_FLAG", raw)
    assert _flag("BR_TEST_FLAG") is expected


def test_flag_unset_or_blank_uses_default(monkeypatch):
    monkeypatch.delenv("BR_TEST_FLAG", raising=False)
    assert _flag("BR_TEST_FLAG") is False
    assert _flag("BR_TEST_FLAG", default=True) is True
    monkeypatch.setenv("BR_TEST_FLAG", "  ")
    assert _flag("BR_TEST_FLAG", default=True) is True
