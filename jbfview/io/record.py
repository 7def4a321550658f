"""Decodes single variable-length entry records.

Record layout, little-endian, relative to the record start::

    0        u32   file name length L (at most 255)
    4        L     file name
    4+L      u64   file time (FILETIME ticks)
    4+L+8    u32   file type code
    4+L+12   u32   width
    4+L+16   u32   height
    4+L+20   u32   bits per pixel
    4+L+24   u32   buffer size
    4+L+28   u32   file size
    4+L+32   8     reserved
    4+L+40   u32   thumbnail sentinel (0xFFFFFFFF when a thumbnail follows)
    4+L+44   u32   thumbnail size S
    4+L+48   S     JPEG thumbnail

Records without a thumbnail advance by ``4 + L + 36`` rather than by the
full fixed region. That is how the browser lays them out on disk, so the
constant is kept as it is.
"""

import logging
import struct
from typing import Optional, Tuple

from jbfview.errors import CorruptError
from jbfview.models import Entry

log = logging.getLogger(__name__)

MAX_FILE_NAME_LENGTH = 255
THUMBNAIL_SENTINEL = 0xFFFFFFFF
JPEG_SOI = b"\xff\xd8"

# Bytes after the file name consumed by a record without a thumbnail.
NO_THUMBNAIL_RECORD_TAIL = 36
# Bytes after the file name up to the start of the thumbnail data.
THUMBNAIL_RECORD_TAIL = 48

# Sentinel position after the file name; it lies past the end of a
# no-thumbnail record.
SENTINEL_OFFSET = 40

_NAME_LENGTH = struct.Struct("<I")
# time, type, width, height, bpp, buffer size, file size
_FIELDS = struct.Struct("<QIIIIII")
_SENTINEL = struct.Struct("<I")
_THUMBNAIL_SIZE = struct.Struct("<I")


def _require(end: int, offset: int, length: int, what: str):
    if offset + length > end:
        raise CorruptError(
            f"record truncated: {what} needs {length} bytes at offset {offset}, "
            f"buffer ends at {end}",
            offset=offset,
        )


def decode_record(
    data,
    offset: int,
    end: Optional[int] = None,
    encoding: str = "cp1252",
) -> Tuple[Entry, int]:
    """Decodes the record starting at ``offset``.

    Returns the entry and the number of bytes the record occupies. No byte at
    or beyond ``end`` (default: ``len(data)``) is ever read; a record that would
    need one raises :class:`CorruptError`, as do an oversized file name and a
    thumbnail without a JPEG start-of-image marker.
    """
    if end is None:
        end = len(data)

    _require(end, offset, _NAME_LENGTH.size, "file name length")
    (name_length,) = _NAME_LENGTH.unpack_from(data, offset)
    if name_length > MAX_FILE_NAME_LENGTH:
        raise CorruptError(
            f"file name length {name_length} exceeds {MAX_FILE_NAME_LENGTH}",
            offset=offset,
        )

    name_start = offset + _NAME_LENGTH.size
    _require(end, name_start, name_length, "file name")
    raw_name = bytes(data[name_start:name_start + name_length])
    file_name = raw_name.split(b"\x00", 1)[0].decode(encoding, errors="replace")

    fields_start = name_start + name_length
    _require(end, fields_start, NO_THUMBNAIL_RECORD_TAIL, "fixed fields")
    (
        file_time,
        file_type_code,
        width,
        height,
        bits_per_pixel,
        buffer_size,
        file_size,
    ) = _FIELDS.unpack_from(data, fields_start)

    sentinel_start = fields_start + SENTINEL_OFFSET
    sentinel = None
    # A sentinel past the buffer end leaves no room for a thumbnail either.
    if sentinel_start + _SENTINEL.size <= end:
        (sentinel,) = _SENTINEL.unpack_from(data, sentinel_start)

    thumbnail = None
    if sentinel != THUMBNAIL_SENTINEL:
        # Raw-format entries carry no thumbnail.
        consumed = _NAME_LENGTH.size + name_length + NO_THUMBNAIL_RECORD_TAIL
    else:
        size_start = sentinel_start + _SENTINEL.size
        _require(end, size_start, _THUMBNAIL_SIZE.size, "thumbnail size")
        (thumbnail_size,) = _THUMBNAIL_SIZE.unpack_from(data, size_start)

        thumbnail_start = fields_start + THUMBNAIL_RECORD_TAIL
        _require(end, thumbnail_start, thumbnail_size, "thumbnail")
        thumbnail = bytes(data[thumbnail_start:thumbnail_start + thumbnail_size])
        if not thumbnail.startswith(JPEG_SOI):
            raise CorruptError(
                f"thumbnail for {file_name!r} does not start with a JPEG SOI marker",
                offset=thumbnail_start,
            )
        consumed = _NAME_LENGTH.size + name_length + THUMBNAIL_RECORD_TAIL + thumbnail_size

    entry = Entry(
        file_name=file_name,
        file_time=file_time,
        file_type_code=file_type_code,
        width=width,
        height=height,
        bits_per_pixel=bits_per_pixel,
        buffer_size=buffer_size,
        file_size=file_size,
        thumbnail=thumbnail,
    )
    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            "Record at 0x%08x: %r %ux%u %ubpp type=0x%02x thumb=%s consumed=%d",
            offset, file_name, width, height, bits_per_pixel, file_type_code,
            len(thumbnail) if thumbnail is not None else "none", consumed,
        )
    return entry, consumed
