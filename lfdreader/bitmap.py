"""
Indexed pixel buffers.

Every image codec stores its pixels as a 2D ``numpy.uint8`` array of palette
indices, shape ``(height, width)``.  Palettes stay separate; :func:`to_image`
combines the two into a Pillow image only when something needs to be shown
or exported.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from .errors import ConstraintError

Color = Tuple[int, int, int]


def as_pixels(value, palette: Sequence[Optional[Color]] | None = None) -> np.ndarray:
    """Return an owned uint8 index buffer from an array or a Pillow image."""
    if isinstance(value, Image.Image):
        return quantize(value, palette)
    array = np.asarray(value)
    if array.ndim != 2:
        raise ConstraintError("pixels", array.shape, "a 2D index buffer")
    if array.dtype != np.uint8 and array.size:
        if array.min() < 0 or array.max() > 255:
            raise ConstraintError("pixels", (int(array.min()), int(array.max())), "indices in 0-255")
    return np.array(array, dtype=np.uint8)


def check_dimensions(pixels: np.ndarray, max_width: int, max_height: int) -> None:
    height, width = pixels.shape
    if width > max_width or height > max_height:
        raise ConstraintError("size", (width, height), f"{max_width}x{max_height} max")


def quantize(image: Image.Image, palette: Sequence[Optional[Color]] | None) -> np.ndarray:
    """
    Map an image onto palette indices.

    "P" and "L" images already hold indices and are copied as-is.  Anything
    else is matched pixel by pixel to the nearest defined palette entry; unset
    entries are never chosen.
    """

    if image.mode in ("P", "L"):
        return np.array(image, dtype=np.uint8)
    if palette is None:
        raise ConstraintError("image.mode", image.mode, "a palette is required for non-indexed images")
    defined = [(index, color) for index, color in enumerate(palette) if color is not None]
    if not defined:
        raise ConstraintError("palette", "empty", "at least one defined color")
    indices = np.array([index for index, _ in defined], dtype=np.uint8)
    colors = np.array([color for _, color in defined], dtype=np.int32)

    rgb = np.asarray(image.convert("RGB"), dtype=np.int32)
    height, width = rgb.shape[:2]
    if height == 0 or width == 0:
        return np.zeros((height, width), dtype=np.uint8)
    unique, inverse = np.unique(rgb.reshape(-1, 3), axis=0, return_inverse=True)
    distance = ((unique[:, None, :] - colors[None, :, :]) ** 2).sum(axis=2)
    nearest = indices[distance.argmin(axis=1)]
    return nearest[inverse.reshape(-1)].reshape(height, width)


def palette_bytes(palette: Sequence[Optional[Color]]) -> bytes:
    flat = bytearray()
    for color in list(palette)[:256]:
        flat.extend(color if color is not None else (0, 0, 0))
    flat.extend(b"\x00" * (768 - len(flat)))
    return bytes(flat)


def to_image(
    pixels: np.ndarray,
    palette: Sequence[Optional[Color]],
    transparent: int | None = None,
) -> Image.Image:
    """Render an index buffer with ``palette`` into a mode "P" Pillow image."""
    buffer = np.ascontiguousarray(pixels, dtype=np.uint8)
    height, width = buffer.shape
    image = Image.frombytes("P", (width, height), buffer.tobytes())
    image.putpalette(palette_bytes(palette))
    if transparent is not None:
        image.info["transparency"] = transparent
    return image
