"""Bitmap decoding for avatar bytes (Pillow)."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from presence_avatars.protocol.errors import DecodeError


def decode_image(data: bytes) -> Image.Image:
    """Decode PNG/JPEG bytes into a fully loaded Pillow image.

    Raises:
        DecodeError: If *data* is empty, truncated or not an image.
    """
    if not data:
        raise DecodeError("No image data")
    try:
        image = Image.open(io.BytesIO(data))
        # Force the pixel data to load so truncated files fail here
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Cannot decode avatar image: {exc}") from exc
    return image


def placeholder_image(size: int) -> Image.Image:
    """Return a fully transparent square RGBA image."""
    return Image.new("RGBA", (int(size), int(size)), (0, 0, 0, 0))
