"""Embedded thumbnail decoding using PyTurboJPEG with a Pillow fallback."""

import logging
from io import BytesIO
from typing import Optional, Tuple

import numpy as np
from PIL import Image

log = logging.getLogger(__name__)

# Attempt to import PyTurboJPEG

try:
    from turbojpeg import TurboJPEG, TJPF_RGB
except ImportError:
    jpeg_decoder = None
    TURBO_AVAILABLE = False
    log.warning("PyTurboJPEG not found. Falling back to Pillow for thumbnail decoding.")
else:
    try:
        jpeg_decoder = TurboJPEG()
    except Exception:
        jpeg_decoder = None
        TURBO_AVAILABLE = False
        log.warning("PyTurboJPEG initialization failed. Falling back to Pillow.", exc_info=True)
    else:
        TURBO_AVAILABLE = True
        log.info("PyTurboJPEG is available. Using it for thumbnail decoding.")


def thumbnail_size(jpeg_bytes: bytes) -> Optional[Tuple[int, int]]:
    """Returns the (width, height) stored in a thumbnail's JPEG header."""
    if not jpeg_bytes:
        return None

    if TURBO_AVAILABLE and jpeg_decoder:
        try:
            width, height, _, _ = jpeg_decoder.decode_header(jpeg_bytes)
            return width, height
        except Exception as e:
            log.debug(f"PyTurboJPEG could not read thumbnail header: {e}. Trying Pillow.")

    try:
        with Image.open(BytesIO(jpeg_bytes)) as img:
            return img.size
    except Exception as e:
        log.warning(f"Pillow could not read thumbnail header: {e}")
        return None


def decode_thumbnail_rgb(jpeg_bytes: bytes) -> Optional[np.ndarray]:
    """Decodes thumbnail bytes into an RGB numpy array."""
    if not jpeg_bytes:
        return None

    if TURBO_AVAILABLE and jpeg_decoder:
        try:
            return jpeg_decoder.decode(jpeg_bytes, pixel_format=TJPF_RGB, flags=0)
        except Exception as e:
            log.debug(f"PyTurboJPEG failed to decode thumbnail: {e}. Trying Pillow.")

    # Fallback to Pillow
    try:
        with Image.open(BytesIO(jpeg_bytes)) as img:
            img.load()
            return np.array(img.convert("RGB"))
    except Exception as e:
        log.warning(f"Pillow also failed to decode thumbnail: {e}")
        return None


def verify_thumbnail(jpeg_bytes: bytes) -> bool:
    """True when the thumbnail decodes to a non-empty RGB image."""
    pixels = decode_thumbnail_rgb(jpeg_bytes)
    return pixels is not None and pixels.ndim == 3 and pixels.size > 0
