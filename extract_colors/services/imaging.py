"""
Extract-Colors Imaging Utilities
Decodes image files, byte strings and base64 payloads into RGBA pixel buffers.
"""
import base64
import binascii
import io
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from extract_colors.config import config
from extract_colors.services.colors.errors import ImageDecodeError, UnsupportedMediaError
from extract_colors.services.colors.models import PixelBuffer

# Vectorized predicate over channel arrays (r, g, b, a) -> boolean mask of pixels to keep.
ColorValidator = Callable[[np.ndarray, np.ndarray, np.ndarray, np.ndarray], np.ndarray]

# Alpha threshold to pair with a color validator: rejected pixels are zeroed,
# accepted ones count as long as they are not (nearly) transparent.
VALIDATOR_ALPHA_THRESHOLD = 1


def detect_mime_type(file_bytes: bytes) -> str:
    """
    Validate file magic bytes to ensure it's actually an image.

    Args:
        file_bytes: Raw file bytes

    Returns:
        Detected MIME type

    Raises:
        UnsupportedMediaError: For unknown formats
        ImageDecodeError: For empty/truncated input
    """
    if len(file_bytes) < 12:
        raise ImageDecodeError("File too small or corrupt")

    if file_bytes.startswith(b'\xff\xd8\xff'):
        return "image/jpeg"
    elif file_bytes.startswith(b'\x89PNG\r\n\x1a\n'):
        return "image/png"
    elif file_bytes[:6] in (b'GIF87a', b'GIF89a'):
        return "image/gif"
    elif file_bytes[:4] == b'RIFF' and file_bytes[8:12] == b'WEBP':
        return "image/webp"
    elif file_bytes.startswith(b'BM'):
        return "image/bmp"
    raise UnsupportedMediaError(
        f"Unsupported image format. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
    )


def apply_color_validator(buffer: PixelBuffer, color_validator: ColorValidator) -> PixelBuffer:
    """Return a copy of ``buffer`` with alpha zeroed wherever the validator rejects the pixel."""
    rgba = buffer.as_array().copy()
    keep = np.asarray(color_validator(rgba[..., 0], rgba[..., 1], rgba[..., 2], rgba[..., 3]),
                      dtype=bool)
    if keep.shape != rgba.shape[:2]:
        raise ValueError(f"color_validator returned shape {keep.shape}, expected {rgba.shape[:2]}")
    rgba[..., 3][~keep] = 0
    return PixelBuffer.from_array(rgba)


def decode_image_bytes(file_bytes: bytes,
                       color_validator: Optional[ColorValidator] = None) -> PixelBuffer:
    """
    Decode encoded image bytes into an RGBA pixel buffer.

    Args:
        file_bytes: Encoded image (PNG, JPEG, WebP, GIF or BMP)
        color_validator: Optional per-pixel filter, see ``apply_color_validator``

    Returns:
        PixelBuffer in RGBA8 row-major layout

    Raises:
        ImageDecodeError: For oversized, corrupt or undecodable input
        UnsupportedMediaError: For formats outside SUPPORTED_MIME_TYPES
    """
    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise ImageDecodeError(f"File too large. Maximum size: {config.MAX_FILE_MB}MB")

    detect_mime_type(file_bytes)

    try:
        pil_image = Image.open(io.BytesIO(file_bytes))
        width, height = pil_image.size
        if width * height > config.MAX_PIXELS:
            raise ImageDecodeError(
                f"Image too large: {width}x{height} exceeds {config.MAX_PIXELS} pixels"
            )
        if pil_image.mode != 'RGBA':
            pil_image = pil_image.convert('RGBA')
        rgba = np.asarray(pil_image, dtype=np.uint8)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Failed to decode image: {str(e)}") from e

    buffer = PixelBuffer.from_array(rgba)
    if color_validator is not None:
        buffer = apply_color_validator(buffer, color_validator)
    return buffer


def decode_base64_image(b64_data: str,
                        color_validator: Optional[ColorValidator] = None) -> PixelBuffer:
    """Decode base64 image data (optionally a data: URL) into a pixel buffer."""
    # Remove data URL prefix if present
    if b64_data.startswith('data:') and ',' in b64_data:
        b64_data = b64_data.split(',', 1)[1]

    try:
        img_bytes = base64.b64decode(b64_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image data: {str(e)}") from e

    return decode_image_bytes(img_bytes, color_validator)


def load_image_path(path: Union[str, Path],
                    color_validator: Optional[ColorValidator] = None) -> PixelBuffer:
    """Read and decode an image file."""
    try:
        file_bytes = Path(path).read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Failed to read image {path}: {e}") from e
    return decode_image_bytes(file_bytes, color_validator)
