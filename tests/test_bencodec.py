import pytest

import bencodec
from bencodec import InvalidBencodeError, UnsupportedBencodeError


@pytest.mark.parametrize(
    "encoded,expected",
    [
        (b"4:test", b"test"),
        (b"i0e", 0),
        (b"le", []),
        (b"de", {}),
        (b"l4:spam4:eggse", [b"spam", b"eggs"]),
        (b"d3:cow3:moo4:spam4:eggse", {b"cow": b"moo", b"spam": b"eggs"}),
    ],
)
def test_decode(encoded, expected):
    """Parametrized test for various decode scenarios."""
    assert bencodec.decode(encoded) == expected


@pytest.mark.parametrize(
    "data,expected",
    [
        (b"test", b"4:test"),
        (0, b"i0e"),
        ([], b"le"),
        ({}, b"de"),
    ],
)
def test_encode(data, expected):
    """Parametrized test for various encode scenarios."""
    assert bencodec.encode(data) == expected


def test_decode_options():
    """Test that parser options are passed through."""
    assert bencodec.decode(b"3:\xe6\xf8\xe5", "latin-1") == "æøå"
    assert list(bencodec.decode(b"d1:b0:1:a0:e", strict_key_order=False)) == [b"b", b"a"]
    with pytest.raises(UnsupportedBencodeError):
        bencodec.decode(b"llee", max_depth=1)


def test_decode_prefix():
    """Test that the consumed byte count is reported."""
    value, consumed = bencodec.decode_prefix(b"d3:cow3:mooe4:spam")
    assert value == {b"cow": b"moo"}
    assert consumed == 12


def test_decode_file(tmp_path):
    path = tmp_path / "value.bencode"
    path.write_bytes(b"li1ei2ee")
    assert bencodec.decode_file(path) == [1, 2]
    assert bencodec.decode_file(str(path)) == [1, 2]


def test_decode_failure_is_deterministic():
    """Test that repeated decodes of bad input fail the same way."""
    errors = []
    for _ in range(2):
        with pytest.raises(InvalidBencodeError) as exc_info:
            bencodec.decode(b"l4:spam5:eggse")
        errors.append((exc_info.value.message, exc_info.value.position))
    assert errors[0] == errors[1]
