"""Exception hierarchy raised while opening and decoding catalogs."""

from pathlib import Path
from typing import Optional, Union


class JbfError(Exception):
    """Base class for every catalog error."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        message = super().__str__()
        if self.path is not None:
            return f"{self.path}: {message}"
        return message


class ArgumentError(JbfError):
    """The catalog path does not exist or cannot be opened for reading."""


class CatalogMemoryError(JbfError, MemoryError):
    """The file contents could not be mapped or read into memory."""


class CorruptError(JbfError):
    """The catalog violates the on-disk layout.

    ``offset`` is the byte position where the problem was detected, when known.
    """

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        offset: Optional[int] = None,
    ):
        super().__init__(message, path)
        self.offset = offset
