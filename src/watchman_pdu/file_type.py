"""File type codes used in query results and ``type`` expression terms."""

from enum import Enum

from .exceptions import UnknownFileTypeError


class FileType(Enum):
    """
    Kind of a filesystem entry, encoded on the wire as a single character.

    The set is closed: decoding any other token is an error rather than a
    fallback value.
    """
    BLOCK_SPECIAL = "b"
    CHAR_SPECIAL = "c"
    DIRECTORY = "d"
    REGULAR = "f"
    FIFO = "p"
    SYMLINK = "l"
    SOCKET = "s"
    SOLARIS_DOOR = "D"

    def __str__(self) -> str:
        return self.value

    def to_wire(self) -> str:
        return self.value

    @classmethod
    def from_wire(cls, token: str) -> "FileType":
        """
        Decode a wire token.

        Raises:
            UnknownFileTypeError: If the token is not one of ``b c d f p l s D``
        """
        try:
            return cls(token)
        except ValueError:
            raise UnknownFileTypeError(
                f"server returned impossible file type {token!r}", token=token
            ) from None
