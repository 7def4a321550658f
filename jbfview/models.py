"""Core data types and enumerations for jbfview."""

import dataclasses
import enum
from pathlib import Path
from typing import Iterator, Optional, Tuple


class FileType(enum.IntEnum):
    """Image format codes stored in catalog records."""
    UNKNOWN = -1
    RAW = 0x00
    BMP = 0x01
    CLP = 0x03
    CUT = 0x04
    DIB = 0x06
    EMF = 0x07
    EPS = 0x08
    FPX = 0x09
    GIF = 0x0A
    IFF = 0x0B
    IMG = 0x0C
    JPG = 0x11
    LBM = 0x13
    MAC = 0x14
    MSP = 0x15
    PBM = 0x16
    PCX = 0x18
    PGM = 0x19
    PIC = 0x1A
    PCT = 0x1B
    PNG = 0x1C
    PPM = 0x1D
    PSD = 0x1E
    PSP = 0x1F
    RAS = 0x20
    RLE = 0x21
    SCT = 0x22
    TGA = 0x23
    TIF = 0x24
    WMF = 0x25
    WPG = 0x26
    RGB = 0x27

    @classmethod
    def from_code(cls, code: int) -> "FileType":
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


@dataclasses.dataclass(frozen=True)
class Entry:
    """Metadata for one image in the catalog, with its optional thumbnail."""
    file_name: str
    file_time: int  # FILETIME ticks (100ns since 1601-01-01 UTC)
    file_type_code: int
    width: int
    height: int
    bits_per_pixel: int
    buffer_size: int
    file_size: int
    thumbnail: Optional[bytes] = dataclasses.field(default=None, repr=False)

    @property
    def file_type(self) -> FileType:
        return FileType.from_code(self.file_type_code)

    @property
    def has_thumbnail(self) -> bool:
        return bool(self.thumbnail)


class Catalog:
    """A fully decoded catalog: the directory name and its entries in file order.

    Instances are only built by :func:`jbfview.io.catalog.decode_catalog`, which
    either returns a complete catalog or raises. Thumbnails are owned ``bytes``
    copies, so they stay valid after :meth:`close`.
    """

    def __init__(self, directory_name: str, entries: Tuple[Entry, ...], path: Optional[Path] = None):
        self._directory_name = directory_name
        self._entries = tuple(entries)
        self._path = path
        self._closed = False

    @property
    def directory_name(self) -> str:
        return self._directory_name

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return self._entries

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Drops the entries. Safe to call more than once."""
        self._entries = ()
        self._closed = True

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __enter__(self) -> "Catalog":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        return f"Catalog(directory_name={self._directory_name!r}, entries={len(self._entries)})"
