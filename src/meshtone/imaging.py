from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import InvalidParameter
from .spaces import Hex, rgb01_to_hex

log = logging.getLogger(__name__)


def extract_colors_from_image(data: bytes, rows: int, cols: int) -> list[Hex]:
    """Sample an encoded image on a rows×cols grid, row-major.

    The image is box-resampled down to exactly rows×cols pixels, so each
    color is the average of its cell rather than a single picked pixel.
    """
    if rows < 1 or cols < 1:
        raise InvalidParameter("rows and cols must be ≥ 1")
    try:
        with Image.open(io.BytesIO(data)) as img:
            small = img.convert("RGB").resize((int(cols), int(rows)), Image.Resampling.BOX)
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidParameter(f"could not decode image: {exc}") from exc
    px = np.asarray(small, dtype=np.float64).reshape(-1, 3) / 255.0
    log.debug("sampled %d colors from %s image", len(px), small.size)
    return [rgb01_to_hex(rgb) for rgb in px]


__all__ = ["extract_colors_from_image"]
