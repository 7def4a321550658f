"""Read-only access to the full contents of a catalog file."""

import logging
import mmap
import os
from pathlib import Path
from typing import Optional, Union

from jbfview.errors import ArgumentError, CatalogMemoryError, CorruptError

log = logging.getLogger(__name__)

# The fixed header region; anything shorter cannot be a catalog.
HEADER_SIZE = 0x400


class ByteSource:
    """Holds a catalog file as a read-only buffer, mapped or read whole.

    ``data`` supports slicing and ``struct.unpack_from``. The buffer stays valid
    until :meth:`close`, which may be called any number of times.
    """

    def __init__(self, path: Union[str, Path], use_mmap: bool = True):
        self.path = Path(path)
        self.use_mmap = use_mmap
        self.size = 0
        self.data: Optional[Union[mmap.mmap, bytes]] = None
        self._file = None
        self._map: Optional[mmap.mmap] = None
        try:
            self._acquire()
        except BaseException:
            self.close()
            raise

    def _acquire(self):
        try:
            self._file = open(self.path, "rb")
        except OSError as e:
            raise ArgumentError(f"cannot open catalog: {e.strerror or e}", self.path) from e

        try:
            self.size = os.fstat(self._file.fileno()).st_size
        except OSError as e:
            raise ArgumentError(f"cannot stat catalog: {e.strerror or e}", self.path) from e

        if self.size < HEADER_SIZE:
            raise CorruptError(
                f"file is {self.size} bytes, smaller than the {HEADER_SIZE}-byte header",
                self.path,
                offset=0,
            )

        if self.use_mmap:
            try:
                self._map = mmap.mmap(self._file.fileno(), 0, access=mmap.ACCESS_READ)
            except (OSError, ValueError, MemoryError) as e:
                raise CatalogMemoryError(f"cannot map catalog: {e}", self.path) from e
            self.data = self._map
        else:
            try:
                self.data = self._file.read()
            except MemoryError as e:
                raise CatalogMemoryError("cannot read catalog into memory", self.path) from e
            except OSError as e:
                raise ArgumentError(f"cannot read catalog: {e.strerror or e}", self.path) from e
            # The file can shrink between fstat and read.
            self.size = len(self.data)
            if self.size < HEADER_SIZE:
                raise CorruptError("file truncated while reading", self.path, offset=self.size)

        # The mapping keeps its own reference to the file.
        self._file.close()
        self._file = None
        log.debug(
            "Acquired %d bytes from %s (%s)",
            self.size, self.path, "mmap" if self._map is not None else "read",
        )

    @property
    def closed(self) -> bool:
        return self.data is None

    def close(self):
        """Releases the buffer and the file handle."""
        if self._map is not None:
            self._map.close()
            self._map = None
        if self._file is not None:
            self._file.close()
            self._file = None
        if self.data is not None:
            log.debug("Released buffer for %s", self.path)
        self.data = None

    def __len__(self) -> int:
        return self.size

    def __enter__(self) -> "ByteSource":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
