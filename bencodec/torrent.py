import hashlib
import logging
from pathlib import Path

from .errors import InvalidBencodeError
from .objects import BDictionary
from .parsing import BencodeParser

PIECE_HASH_SIZE = 20

logger = logging.getLogger(__name__)


def _raw_value(parser: BencodeParser, data, key: bytes) -> bytes:
    """Bytes of the value under `key` in the top-level dictionary of already validated `data`."""
    reader = parser.reader(data)
    reader.expect(b"d")

    while reader.peek() != b"e":
        k = parser.string_parser.parse_from(reader)
        start = reader.position
        parser.parse_from(reader, 1)
        if k == key:
            return reader.source[start : reader.position]

    raise KeyError(key)


class TorrentFile:
    """
    Metainfo of a .torrent file.

    The info hash is computed over the info dictionary exactly as it was read,
    so a file with unsorted keys or padded lengths hashes the same as in
    other clients.
    """

    def __init__(self, metainfo: BDictionary, info_bytes: bytes | None = None):
        self.metainfo = metainfo
        self.info_bytes = info_bytes if info_bytes is not None else self.info.encode()

    def __repr__(self):
        return f"TorrentFile(name={self.name!r}, info_hash={self.info_hash.hex()})"

    @property
    def info(self) -> BDictionary:
        return self.metainfo[b"info"]

    @property
    def info_hash(self) -> bytes:
        return hashlib.sha1(self.info_bytes).digest()

    @property
    def announce(self) -> str | None:
        if b"announce" not in self.metainfo:
            return None
        return str(self.metainfo[b"announce"])

    @property
    def name(self) -> str:
        return str(self.info[b"name"])

    @property
    def length(self) -> int:
        """Total payload size, summed over the files of a multi-file torrent."""
        if b"files" in self.info:
            return sum(f[b"length"].value for f in self.info[b"files"])
        return self.info[b"length"].value

    @property
    def piece_length(self) -> int:
        return self.info[b"piece length"].value

    @property
    def pieces(self) -> list[bytes]:
        hashes = self.info[b"pieces"].value
        if len(hashes) % PIECE_HASH_SIZE:
            raise InvalidBencodeError(f"Piece hashes are {len(hashes)} bytes, not a multiple of {PIECE_HASH_SIZE}")
        return [hashes[i : i + PIECE_HASH_SIZE] for i in range(0, len(hashes), PIECE_HASH_SIZE)]

    @classmethod
    def from_bytes(cls, data, parser: BencodeParser | None = None) -> "TorrentFile":
        parser = parser or BencodeParser()
        metainfo = parser.parse(data)

        if not isinstance(metainfo, BDictionary) or not isinstance(metainfo.get(b"info"), BDictionary):
            raise InvalidBencodeError("Torrent metainfo must be a dictionary holding an info dictionary")

        return cls(metainfo, _raw_value(parser, data, b"info"))

    @classmethod
    def from_file(cls, file: str | Path, parser: BencodeParser | None = None) -> "TorrentFile":
        data = Path(file).read_bytes()
        logger.debug(f"Read torrent {file}, {len(data)} bytes")
        return cls.from_bytes(data, parser)
