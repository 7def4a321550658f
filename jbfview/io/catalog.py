"""Opens catalog files and walks their records into a Catalog."""

import logging
import struct
import time
from pathlib import Path
from typing import List, Optional, Union

from jbfview.errors import CorruptError
from jbfview.io.record import decode_record
from jbfview.io.source import HEADER_SIZE, ByteSource
from jbfview.models import Catalog, Entry

log = logging.getLogger(__name__)

MAGIC = b"JASC BROWS FILE\x00"
COUNT_OFFSET = 19
DIRECTORY_NAME_OFFSET = 23
DIRECTORY_NAME_MAX = 0x400
FIRST_RECORD_OFFSET = HEADER_SIZE
DEFAULT_ENCODING = "cp1252"

_COUNT = struct.Struct("<I")


def decode_catalog(source: ByteSource, encoding: str = DEFAULT_ENCODING) -> Catalog:
    """Decodes the header and every declared record of ``source``.

    Either every declared entry decodes and a complete :class:`Catalog` is
    returned, or :class:`CorruptError` is raised and nothing is kept.
    """
    data = source.data
    size = source.size
    if data is None:
        raise CorruptError("source is closed", source.path)
    if size < HEADER_SIZE:
        raise CorruptError(f"file is {size} bytes, smaller than the header", source.path, offset=0)

    if bytes(data[:len(MAGIC)]) != MAGIC:
        raise CorruptError("bad magic, not a JASC browser file", source.path, offset=0)

    (count,) = _COUNT.unpack_from(data, COUNT_OFFSET)

    name_end = min(DIRECTORY_NAME_OFFSET + DIRECTORY_NAME_MAX, size)
    raw_name = bytes(data[DIRECTORY_NAME_OFFSET:name_end]).split(b"\x00", 1)[0]
    directory_name = raw_name.decode(encoding, errors="replace")
    log.info("Catalog %s declares %d entries for %r", source.path, count, directory_name)

    entries: List[Entry] = []
    offset = FIRST_RECORD_OFFSET
    try:
        while len(entries) < count:
            entry, consumed = decode_record(data, offset, size, encoding)
            offset += consumed
            if offset > size:
                raise CorruptError(
                    f"entry {len(entries)} runs past end of file ({offset} > {size})",
                    offset=offset,
                )
            entries.append(entry)
    except CorruptError as e:
        log.warning(
            "Rejecting %s: entry %d of %d is corrupt: %s",
            source.path, len(entries), count, e,
        )
        entries.clear()
        e.path = source.path
        raise

    if offset < size:
        log.debug("Ignoring %d trailing bytes after the last entry", size - offset)
    return Catalog(directory_name, tuple(entries), source.path)


def open_catalog(
    path: Union[str, Path],
    encoding: str = DEFAULT_ENCODING,
    use_mmap: bool = True,
) -> Catalog:
    """Opens and fully decodes the catalog at ``path``.

    Raises :class:`~jbfview.errors.ArgumentError` if the file cannot be opened,
    :class:`~jbfview.errors.CatalogMemoryError` if it cannot be loaded, and
    :class:`~jbfview.errors.CorruptError` for any layout violation. The file is
    released before this returns, whether or not decoding succeeded.
    """
    t_start = time.perf_counter()
    with ByteSource(path, use_mmap=use_mmap) as source:
        catalog = decode_catalog(source, encoding)
    log.info(
        "Opened %s: %d entries, %d with thumbnails, in %.3fs",
        path, len(catalog), sum(1 for e in catalog if e.has_thumbnail),
        time.perf_counter() - t_start,
    )
    return catalog


def close_catalog(catalog: Optional[Catalog]):
    """Releases ``catalog``. ``None`` and already closed catalogs are ignored."""
    if catalog is None or catalog.closed:
        return
    catalog.close()
    log.debug("Closed catalog %s", catalog.path)
