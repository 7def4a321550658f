"""Human-readable labels for entry fields, worded the way Paint Shop Pro 7 shows them."""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from jbfview.models import FileType

FILE_TYPE_LABELS = {
    FileType.RAW: "Raw File Format",
    FileType.BMP: "Windows or OS/2 Bitmap",
    FileType.CLP: "Windows Clipboard",
    FileType.CUT: "Dr. Halo",
    FileType.DIB: "OS/2 or Windows DIB",
    FileType.EMF: "Windows Enhanced Meta File",
    FileType.EPS: "Encapsulated PostScript",
    FileType.FPX: "FlashPix",
    FileType.GIF: "CompuServe GIF",
    FileType.IFF: "Amiga Interchange Format",
    FileType.IMG: "GEM Paint",
    FileType.JPG: "JPEG - JFIF Compliant",
    FileType.LBM: "Deluxe Paint",
    FileType.MAC: "MacPaint",
    FileType.MSP: "Microsoft Paint",
    FileType.PBM: "Portable Bitmap",
    FileType.PCX: "Zsoft Paintbrush",
    FileType.PGM: "Portable Greymap",
    FileType.PIC: "PC Paint",
    FileType.PCT: "Macintosh PICT",
    FileType.PNG: "Portable Network Graphics",
    FileType.PPM: "Portable Pixelmap",
    FileType.PSD: "Photoshop 2.5",
    FileType.PSP: "Paint Shop Pro",
    FileType.RAS: "SUN Raster Images",
    FileType.RLE: "Compressed Bitmap",
    FileType.SCT: "SciTex Continuous Tone",
    FileType.TGA: "Truevision Targa",
    FileType.TIF: "Tagged Image File Format",
    FileType.WMF: "Windows Meta File",
    FileType.WPG: "Word Perfect",
    FileType.RGB: "SGI Image File",
}

BIT_DEPTH_LABELS = {
    1: "2",
    4: "16",
    8: "256",
    24: "16 Million",
}

FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)
TICKS_PER_MICROSECOND = 10

KB = 1024
MB = 1024 * KB
GB = 1024 * MB


def file_type_label(code: int) -> str:
    return FILE_TYPE_LABELS.get(FileType.from_code(code), "Unknown type")


def bit_depth_label(bits_per_pixel: int) -> str:
    """Colour count for the common depths, e.g. 24 -> "16 Million"."""
    return BIT_DEPTH_LABELS.get(bits_per_pixel, f"{bits_per_pixel} bpp")


def file_size_label(size: int) -> str:
    if size < KB:
        return f"{size} bytes"
    if size < MB:
        return f"{size / KB:.1f} KB"
    if size < GB:
        return f"{size / MB:.2f} MB"
    return f"{size / GB:.2f} GB"


def filetime_to_datetime(ticks: int) -> Optional[datetime]:
    """Converts FILETIME ticks to an aware UTC datetime, or None if out of range."""
    try:
        return FILETIME_EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)
    except OverflowError:
        return None


def format_filetime(ticks: int, tz: Optional[tzinfo] = None) -> str:
    """
    Formats FILETIME ticks as "YYYY-MM-DD HH:MM:SS".

    Uses local time unless ``tz`` is given. Sub-second precision is dropped.
    """
    moment = filetime_to_datetime(ticks)
    if moment is None:
        return "Unknown time"
    try:
        moment = moment.astimezone(tz)
    except (OverflowError, OSError, ValueError):
        return "Unknown time"
    return moment.strftime("%Y-%m-%d %H:%M:%S")
