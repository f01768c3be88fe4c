class BencodeError(Exception):
    """Base class for every error raised while decoding bencode."""

    def __init__(self, message: str, position: int | None = None):
        self.message = message
        self.position = position

        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class InvalidBencodeError(BencodeError, ValueError):
    """The input does not follow the bencode grammar."""


class UnsupportedBencodeError(BencodeError):
    """The input is well formed but exceeds a limit of this decoder."""
