"""Image bytes → RGBA PixelBuffer (Pillow).

Equivalent of drawing the upload on a full-size canvas and reading
back its ImageData: full resolution, first frame of animated images.
"""

from __future__ import annotations

import io

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..domain.evaluation.models import PixelBuffer
from ..domain.shared.errors import ImageDecodeError


def decode_rgba(raw: bytes) -> PixelBuffer:
    """Decode image bytes into a flat RGBA buffer.

    Raises:
        ImageDecodeError: Empty payload or unreadable image data
    """
    if not raw:
        raise ImageDecodeError("EMPTY_IMAGE")
    try:
        with Image.open(io.BytesIO(raw)) as img:
            rgba = img.convert("RGBA")
            data = np.asarray(rgba, dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"UNSUPPORTED_IMAGE:{exc}") from exc
    except (OSError, ValueError, SyntaxError, EOFError) as exc:
        # truncated or corrupt data surfaces on load(); PIL uses SyntaxError for broken chunks
        raise ImageDecodeError(f"DECODE_FAILED:{exc}") from exc
    return PixelBuffer(data, copy=False)
