import pytest

from zeightycore.keys import KEYS, key_code, key_name


def test_known_codes():
    assert key_code("DOWN") == 0x00
    assert key_code("ENTER") == 0x10
    assert key_code("2nd") == 0x65
    assert key_code("DEL") == 0x67


def test_known_names():
    assert key_name(0x03) == "UP"
    assert key_name(0x57) == "ALPHA"


@pytest.mark.parametrize("name", list(KEYS))
def test_round_trip(name):
    assert key_name(key_code(name)) == name


def test_codes_are_unique():
    assert len(set(KEYS.values())) == len(KEYS)


def test_unknown_name_raises():
    with pytest.raises(KeyError):
        key_code("NOSUCHKEY")


def test_unknown_code_raises():
    with pytest.raises(KeyError):
        key_name(0xFF)