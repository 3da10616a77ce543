"""Exceptions raised by the color extraction pipeline."""


class InvalidDimensionsError(ValueError):
    """Image width/height is not positive or the buffer size does not match it."""


class AllocationFailureError(RuntimeError):
    """Working buffers for an extraction could not be allocated."""


class ImageDecodeError(ValueError):
    """Input bytes could not be decoded into an RGBA pixel buffer."""


class UnsupportedMediaError(ImageDecodeError):
    """Input is not one of the supported image formats."""
