"""Shared fixtures: synthetic catalog files and real JPEG thumbnails."""

import struct
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional

import pytest
from PIL import Image

from jbfview.models import Entry

MAGIC = b"JASC BROWS FILE\x00"


def build_record(
    entry: Entry,
    name_length: Optional[int] = None,
    sentinel: Optional[int] = None,
    thumbnail_size: Optional[int] = None,
) -> bytes:
    """Encodes ``entry`` the way the browser lays records out on disk.

    The overrides let tests write inconsistent records.
    """
    name = entry.file_name.encode("cp1252")
    record = struct.pack("<I", len(name) if name_length is None else name_length) + name
    record += struct.pack(
        "<QIIIIII",
        entry.file_time,
        entry.file_type_code,
        entry.width,
        entry.height,
        entry.bits_per_pixel,
        entry.buffer_size,
        entry.file_size,
    )
    if entry.thumbnail is None:
        # Only the first half of the reserved field belongs to the record.
        record += b"\x00" * 4
        if sentinel is not None:
            record += b"\x00" * 4 + struct.pack("<I", sentinel)
        return record

    thumbnail = entry.thumbnail
    record += b"\x00" * 8
    record += struct.pack("<I", 0xFFFFFFFF if sentinel is None else sentinel)
    record += struct.pack("<I", len(thumbnail) if thumbnail_size is None else thumbnail_size)
    return record + thumbnail


def build_catalog(
    entries: Iterable[Entry] = (),
    directory_name: str = "C:\\My Pictures",
    count: Optional[int] = None,
    magic: bytes = MAGIC,
    trailer: bytes = b"\x00" * 16,
) -> bytes:
    entries = list(entries)
    header = bytearray(0x400)
    header[0:len(magic)] = magic
    header[19:23] = struct.pack("<I", len(entries) if count is None else count)
    name = directory_name.encode("cp1252")[:1001]
    header[23:23 + len(name)] = name
    return bytes(header) + b"".join(build_record(e) for e in entries) + trailer


def make_entry(name: str = "IMG_0001.JPG", thumbnail: Optional[bytes] = None, **fields) -> Entry:
    values = dict(
        file_time=125911584000000000,  # 2000-01-01 00:00:00 UTC
        file_type_code=0x11,
        width=640,
        height=480,
        bits_per_pixel=24,
        buffer_size=640 * 480 * 3,
        file_size=123456,
    )
    values.update(fields)
    return Entry(file_name=name, thumbnail=thumbnail, **values)


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A real 16x12 JPEG, like the thumbnails the browser embeds."""
    buf = BytesIO()
    Image.new("RGB", (16, 12), (200, 30, 30)).save(buf, "JPEG")
    return buf.getvalue()


@pytest.fixture
def record_builder():
    return build_record


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def catalog_builder():
    return build_catalog


@pytest.fixture
def catalog_file(tmp_path: Path):
    """Writes a synthetic catalog and returns its path."""
    def _create(entries: Iterable[Entry] = (), name: str = "pspbrwse.jbf", **kwargs) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_catalog(entries, **kwargs))
        return path
    return _create
