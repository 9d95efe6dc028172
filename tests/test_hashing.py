import string

import pytest

from pluginhub.hashing import hash_bytes, random_bytes, random_string


def test_random_bytes_has_32_bytes():
    data = random_bytes()
    assert isinstance(data, bytes)
    assert len(data) == 32


def test_random_bytes_differ_between_calls():
    assert len({random_bytes() for _ in range(5)}) == 5


def test_hash_of_zero_bytes_is_known_digest():
    assert (
        hash_bytes(bytes(32))
        == "66687aadf862bd776c8fc18b8e9f8e20089714856ee233b3902a591d0d5f2925"
    )


def test_hash_is_64_lower_hex_chars():
    digest = hash_bytes(random_bytes())
    assert len(digest) == 64
    assert set(digest) <= set("0123456789abcdef")


def test_hash_is_deterministic():
    data = random_bytes()
    assert hash_bytes(data) == hash_bytes(bytearray(data))


def test_hash_distinguishes_inputs():
    assert hash_bytes(bytes(32)) != hash_bytes(b"\x01" * 32)
    assert hash_bytes(bytes(32)) != hash_bytes(b"\x00" * 31 + b"\x01")


@pytest.mark.parametrize("size", [0, 31, 33])
def test_hash_rejects_wrong_length(size):
    with pytest.raises(ValueError):
        hash_bytes(bytes(size))


@pytest.mark.parametrize("length", [0, 1, 8, 64])
def test_random_string_length_and_alphabet(length):
    value = random_string(length)
    assert len(value) == length
    assert set(value) <= set(string.ascii_letters + string.digits)


def test_random_string_rejects_negative_length():
    with pytest.raises(ValueError):
        random_string(-1)