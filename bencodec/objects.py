from collections.abc import Mapping, Sequence

DEFAULT_ENCODING = "utf-8"


class BObject:
    """Common base of the four bencode value types."""

    __slots__ = ()

    def to_native(self):
        raise NotImplementedError

    def encode(self) -> bytes:
        from .encoding import Encoder

        return Encoder().encode(self)


class BString(BObject):
    """
    Raw octets plus the text encoding used to show and compare them as text.

    Equality and hashing work on the raw bytes. Comparing against a `str`
    encodes the text with this string's encoding first.
    """

    __slots__ = ("_value", "_encoding")

    def __init__(self, value: bytes | bytearray | memoryview | str = b"", encoding: str = DEFAULT_ENCODING):
        match value:
            case str():
                value = value.encode(encoding)
            case bytes() | bytearray() | memoryview():
                value = bytes(value)
            case _:
                raise TypeError(f"BString needs bytes or str, got {type(value).__name__}")

        self._value = value
        self._encoding = encoding

    @property
    def value(self) -> bytes:
        return self._value

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def length(self) -> int:
        return len(self._value)

    def __len__(self):
        return len(self._value)

    def __str__(self):
        return self._value.decode(self._encoding, errors="replace")

    def __repr__(self):
        return f"BString({self._value!r})"

    def __hash__(self):
        return hash(self._value)

    def __eq__(self, other):
        match other:
            case BString():
                return self._value == other._value
            case bytes() | bytearray():
                return self._value == other
            case str():
                try:
                    return self._value == other.encode(self._encoding)
                except UnicodeEncodeError:
                    return False
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, BString):
            return self._value < other._value
        if isinstance(other, (bytes, bytearray)):
            return self._value < other
        return NotImplemented

    def to_native(self) -> bytes:
        return self._value


class BInteger(BObject):
    __slots__ = ("_value",)

    def __init__(self, value: int = 0):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"BInteger needs an int, got {type(value).__name__}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def __int__(self):
        return self._value

    def __index__(self):
        return self._value

    def __repr__(self):
        return f"BInteger({self._value})"

    def __hash__(self):
        return hash(self._value)

    def __eq__(self, other):
        match other:
            case BInteger():
                return self._value == other._value
            case int():
                return self._value == other
        return NotImplemented

    def to_native(self) -> int:
        return self._value


class BList(BObject, Sequence):
    """Ordered, immutable sequence of bencode values."""

    __slots__ = ("_items",)

    def __init__(self, items=()):
        self._items = tuple(items)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return BList(self._items[index])
        return self._items[index]

    def __len__(self):
        return len(self._items)

    def __repr__(self):
        return f"BList({list(self._items)!r})"

    def __hash__(self):
        return hash(self._items)

    def __eq__(self, other):
        match other:
            case BList():
                return self._items == other._items
            case list() | tuple():
                return len(self._items) == len(other) and all(a == b for a, b in zip(self._items, other))
        return NotImplemented

    def to_native(self) -> list:
        return [item.to_native() for item in self._items]


def _key(key, encoding: str = DEFAULT_ENCODING) -> BString:
    match key:
        case BString():
            return key
        case bytes() | bytearray() | memoryview() | str():
            return BString(key, encoding)
    raise TypeError(f"Dictionary keys must be byte strings, got {type(key).__name__}")


class BDictionary(BObject, Mapping):
    """
    Ordered, immutable mapping from BString keys to bencode values.

    Keys may be looked up as BString, bytes or str; str keys are encoded with
    the dictionary's encoding. Iteration follows the order the pairs were
    given in, which for decoded values is input order.
    """

    __slots__ = ("_entries", "_encoding")

    def __init__(self, entries=(), encoding: str = DEFAULT_ENCODING):
        if isinstance(entries, Mapping):
            entries = entries.items()
        self._encoding = encoding
        self._entries = {_key(k, encoding): v for k, v in entries}

    @property
    def encoding(self) -> str:
        return self._encoding

    def __getitem__(self, key):
        try:
            return self._entries[_key(key, self._encoding)]
        except TypeError:
            raise KeyError(key) from None

    def __contains__(self, key):
        try:
            return _key(key, self._encoding) in self._entries
        except TypeError:
            return False

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return f"BDictionary({self._entries!r})"

    def __hash__(self):
        # Equality ignores key order, so the hash must too
        return hash(frozenset(self._entries.items()))

    def __eq__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        if len(self) != len(other):
            return False
        try:
            theirs = {_key(k, self._encoding): v for k, v in other.items()}
        except TypeError:
            return False
        return all(k in theirs and theirs[k] == v for k, v in self._entries.items())

    def to_native(self) -> dict:
        return {k.value: v.to_native() for k, v in self._entries.items()}


def to_bobject(obj, encoding: str = DEFAULT_ENCODING) -> BObject:
    """Convert native python values (recursively) into bencode value objects."""
    match obj:
        case BObject():
            return obj
        case bool():
            return BInteger(int(obj))
        case int():
            return BInteger(obj)
        case bytes() | bytearray() | memoryview() | str():
            return BString(obj, encoding)
        case list() | tuple():
            return BList(to_bobject(item, encoding) for item in obj)
        case Mapping():
            return BDictionary(((_key(k, encoding), to_bobject(v, encoding)) for k, v in obj.items()), encoding)
        case _:
            raise TypeError(f"Cannot represent {type(obj).__name__} in bencode")
