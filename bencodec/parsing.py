"""
Decoding of bencoded data into the value objects of `bencodec.objects`.

Bencode has four types:
1. Byte strings: <length>:<bytes>, for eg, 4:spam.
2. Integers: i<integer>e, for eg, i42e or i-3e.
3. Lists: l<values>e, for eg, l4:spam4:eggse.
4. Dictionaries: d<key><value>...e with byte string keys in sorted order,
   for eg, d3:cow3:moo4:spam4:eggse.

`BencodeParser` looks at the next byte and hands off to the parser for that
type. The list and dictionary parsers call back into it for their elements.
Parsers only hold configuration; the read position lives in a
`BencodeReader` created for each call, so one parser can be shared.
"""

import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path

from .errors import InvalidBencodeError, UnsupportedBencodeError
from .objects import DEFAULT_ENCODING, BDictionary, BInteger, BList, BObject, BString

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256

# Each nesting level costs two stack frames: the dispatcher and the container parser
FRAMES_PER_LEVEL = 2
STACK_HEADROOM = 200

# Byte string lengths are capped at the signed 32-bit range
MAX_LENGTH_DIGITS = 10
MAX_STRING_LENGTH = 2**31 - 1

MAX_INTEGER_DIGITS = 19
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class BencodeReader:
    """Read cursor over the bytes of a single decode call."""

    def __init__(self, source: bytes):
        self.source = source
        self.current = 0

    @property
    def position(self) -> int:
        return self.current

    @property
    def remaining(self) -> int:
        return len(self.source) - self.current

    def peek(self) -> bytes:
        """Next byte without consuming it, or b"" at the end of input."""
        return self.source[self.current : self.current + 1]

    def advance(self, count: int = 1) -> bytes:
        chunk = self.source[self.current : self.current + count]
        self.current += len(chunk)
        return chunk

    def expect(self, char: bytes) -> bytes:
        c = self.peek()
        if c != char:
            got = repr(c) if c else "end of input"
            raise InvalidBencodeError(f"Expected {char!r}, got {got} instead", self.current)

        return self.advance()

    def read_digits(self) -> bytes:
        end = self.current
        while end < len(self.source) and 0x30 <= self.source[end] <= 0x39:
            end += 1

        return self.advance(end - self.current)

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)


class BObjectParser(ABC):
    encoding = DEFAULT_ENCODING

    @abstractmethod
    def parse_from(self, reader: BencodeReader, depth: int = 0) -> BObject:
        """Decode one value at the reader's position, advancing past it."""

    def parse(self, data: bytes | bytearray | memoryview | str) -> BObject:
        """Decode `data`, which must hold exactly one value."""
        reader = self.reader(data)
        value = self.parse_from(reader)

        if not reader.is_at_end():
            raise InvalidBencodeError(
                f"Unexpected data after {type(value).__name__}, {reader.remaining} bytes left",
                reader.position,
            )

        logger.debug(f"Decoded {type(value).__name__} from {reader.position} bytes")
        return value

    def parse_prefix(self, data: bytes | bytearray | memoryview | str) -> tuple[BObject, int]:
        """Decode the value at the start of `data`, returning it with the number of bytes consumed."""
        reader = self.reader(data)
        value = self.parse_from(reader)
        return value, reader.position

    def reader(self, data) -> BencodeReader:
        match data:
            case str():
                data = data.encode(self.encoding)
            case bytes():
                pass
            case bytearray() | memoryview():
                data = bytes(data)
            case _:
                raise TypeError(f"Data to decode must be bytes, got {type(data).__name__}")

        return BencodeReader(data)


class BStringParser(BObjectParser):
    def __init__(self, encoding: str = DEFAULT_ENCODING):
        self.encoding = encoding

    def parse_from(self, reader: BencodeReader, depth: int = 0) -> BString:
        start = reader.position

        # Shortest valid byte string is "0:"
        if reader.remaining < 2:
            raise InvalidBencodeError("Byte string must be at least 2 characters", start)

        if not reader.peek().isdigit():
            raise InvalidBencodeError(
                f"Byte string must begin with a length digit, got {reader.peek()!r}", start
            )

        digits = reader.read_digits()

        if len(digits) > MAX_LENGTH_DIGITS:
            raise UnsupportedBencodeError(
                f"Byte string length has {len(digits)} digits, at most {MAX_LENGTH_DIGITS} are supported",
                start,
            )

        if reader.peek() != b":":
            raise InvalidBencodeError("Byte string length must be followed by ':'", reader.position)

        length = int(digits)
        if length > MAX_STRING_LENGTH:
            raise UnsupportedBencodeError(
                f"Byte string length {length} is above the supported maximum {MAX_STRING_LENGTH}", start
            )

        reader.advance()

        if reader.remaining < length:
            raise InvalidBencodeError(
                f"Byte string has less chars than specified: {length} expected, {reader.remaining} left",
                start,
            )

        return BString(reader.advance(length), self.encoding)


class BIntegerParser(BObjectParser):
    def parse_from(self, reader: BencodeReader, depth: int = 0) -> BInteger:
        start = reader.position
        reader.expect(b"i")

        negative = reader.peek() == b"-"
        if negative:
            reader.advance()

        digits = reader.read_digits()
        if not digits:
            raise InvalidBencodeError("Integer has no digits", reader.position)

        if reader.peek() != b"e":
            got = repr(reader.peek()) if reader.peek() else "end of input"
            raise InvalidBencodeError(f"Expected b'e' to end integer, got {got} instead", reader.position)

        if len(digits) > 1 and digits.startswith(b"0"):
            raise InvalidBencodeError("Integer must not have leading zeros", start)

        if negative and digits == b"0":
            raise InvalidBencodeError("Integer -0 is not allowed", start)

        if len(digits) > MAX_INTEGER_DIGITS:
            raise UnsupportedBencodeError(f"Integer with {len(digits)} digits is not supported", start)

        value = -int(digits) if negative else int(digits)
        if not INT64_MIN <= value <= INT64_MAX:
            raise UnsupportedBencodeError(f"Integer {value} is outside the 64-bit range", start)

        reader.advance()

        return BInteger(value)


class BListParser(BObjectParser):
    def __init__(self, parser: "BencodeParser | None" = None):
        self.parser = parser or BencodeParser()
        self.encoding = self.parser.encoding

    def parse_from(self, reader: BencodeReader, depth: int = 0) -> BList:
        self.parser.check_depth(depth, reader.position)
        reader.expect(b"l")

        items = []
        while reader.peek() != b"e":
            if reader.is_at_end():
                raise InvalidBencodeError("Reached end of input before list was closed with 'e'", reader.position)

            items.append(self.parser.parse_from(reader, depth + 1))

        reader.expect(b"e")

        return BList(items)


class BDictionaryParser(BObjectParser):
    """
    Parses dictionaries. Keys must be unique byte strings.

    With `strict_key_order` (the default) keys must also appear in ascending
    raw byte order, as canonical bencode requires. Without it unsorted keys
    are kept in the order they were read. The setting belongs to the
    dispatching parser so nested dictionaries follow it too.
    """

    def __init__(self, parser: "BencodeParser | None" = None, strict_key_order: bool | None = None):
        if parser is None:
            parser = BencodeParser(strict_key_order=True if strict_key_order is None else strict_key_order)
        elif strict_key_order is not None and strict_key_order != parser.strict_key_order:
            raise ValueError("strict_key_order conflicts with the one of the given parser")

        self.parser = parser
        self.encoding = parser.encoding

    @property
    def strict_key_order(self) -> bool:
        return self.parser.strict_key_order

    def parse_from(self, reader: BencodeReader, depth: int = 0) -> BDictionary:
        self.parser.check_depth(depth, reader.position)
        reader.expect(b"d")

        entries = {}
        previous = None

        while reader.peek() != b"e":
            c = reader.peek()
            if not c:
                raise InvalidBencodeError(
                    "Reached end of input before dictionary was closed with 'e'", reader.position
                )
            if not c.isdigit():
                raise InvalidBencodeError(f"Dictionary key must be a byte string, got {c!r}", reader.position)

            key_position = reader.position
            key = self.parser.string_parser.parse_from(reader)

            if key in entries:
                raise InvalidBencodeError(f"Duplicate dictionary key {key.value!r}", key_position)

            if self.strict_key_order and previous is not None and key < previous:
                raise InvalidBencodeError(
                    f"Dictionary keys are not sorted, {key.value!r} after {previous.value!r}", key_position
                )

            entries[key] = self.parser.parse_from(reader, depth + 1)
            previous = key

        reader.expect(b"e")

        return BDictionary(entries, self.encoding)


class BencodeParser(BObjectParser):
    """Decodes any bencode value by dispatching on its first byte."""

    def __init__(
        self,
        encoding: str = DEFAULT_ENCODING,
        max_depth: int = DEFAULT_MAX_DEPTH,
        strict_key_order: bool = True,
    ):
        limit = (sys.getrecursionlimit() - STACK_HEADROOM) // FRAMES_PER_LEVEL
        if not 0 < max_depth <= limit:
            raise ValueError(f"max_depth must be between 1 and {limit} with the current recursion limit, got {max_depth}")

        self.encoding = encoding
        self.max_depth = max_depth
        self.strict_key_order = strict_key_order

        self.string_parser = BStringParser(encoding)
        self.integer_parser = BIntegerParser()
        self.list_parser = BListParser(self)
        self.dictionary_parser = BDictionaryParser(self)

    def parse_from(self, reader: BencodeReader, depth: int = 0) -> BObject:
        c = reader.peek()
        match c:
            case _ if c.isdigit():
                return self.string_parser.parse_from(reader)

            case b"i":
                return self.integer_parser.parse_from(reader)

            case b"l":
                return self.list_parser.parse_from(reader, depth)

            case b"d":
                return self.dictionary_parser.parse_from(reader, depth)

            case b"":
                raise InvalidBencodeError("Unexpected end of input, expected a value", reader.position)

            case _:
                raise InvalidBencodeError(f"Invalid type marker {c!r}", reader.position)

    def parse_file(self, path: str | Path) -> BObject:
        """Read the whole file at `path` and decode it."""
        data = Path(path).read_bytes()
        logger.debug(f"Read {len(data)} bytes from {path}")
        return self.parse(data)

    def check_depth(self, depth: int, position: int):
        if depth >= self.max_depth:
            raise UnsupportedBencodeError(f"Nesting deeper than {self.max_depth} levels is not supported", position)
