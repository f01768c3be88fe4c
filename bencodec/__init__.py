from pathlib import Path

from .encoding import Encoder
from .errors import BencodeError, InvalidBencodeError, UnsupportedBencodeError
from .objects import DEFAULT_ENCODING, BDictionary, BInteger, BList, BObject, BString, to_bobject
from .parsing import BencodeParser

__all__ = [
    "BDictionary",
    "BInteger",
    "BList",
    "BObject",
    "BString",
    "BencodeError",
    "BencodeParser",
    "Encoder",
    "InvalidBencodeError",
    "UnsupportedBencodeError",
    "decode",
    "decode_file",
    "decode_prefix",
    "encode",
    "to_bobject",
]


def decode(data, encoding: str = DEFAULT_ENCODING, **options) -> BObject:
    return BencodeParser(encoding, **options).parse(data)


def decode_prefix(data, encoding: str = DEFAULT_ENCODING, **options) -> tuple[BObject, int]:
    return BencodeParser(encoding, **options).parse_prefix(data)


def decode_file(path: str | Path, encoding: str = DEFAULT_ENCODING, **options) -> BObject:
    return BencodeParser(encoding, **options).parse_file(path)


def encode(obj) -> bytes:
    return Encoder().encode(obj)
