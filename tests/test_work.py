import pytest

from frontier.bytes import format_hash
from frontier.work import Work


def test_without_number_has_three_entries():
    work = Work(pow_hash=b"\x01" * 32, seed_hash=b"\x02" * 32, target=b"\x03" * 32)
    encoded = work.to_json()
    assert encoded == [
        format_hash(b"\x01" * 32),
        format_hash(b"\x02" * 32),
        format_hash(b"\x03" * 32),
    ]


def test_with_number_appends_quantity():
    encoded = Work(number=4096).to_json()
    assert len(encoded) == 4
    assert int(encoded[3], 16) == 4096
    assert encoded[:3] == [format_hash(bytes(32))] * 3


def test_hex_input_is_accepted():
    text = "0x" + "ab" * 32
    assert Work(pow_hash=text).to_json()[0] == text


def test_invalid_hash_length():
    with pytest.raises(ValueError):
        Work(target=bytes(5))