"""
Pixel sampling and histogram quantization.

Subsamples the RGBA buffer on a regular grid, drops pixels at or below the
alpha threshold and counts the survivors in a fixed 32x32x32 histogram.
Every non-empty bucket becomes one weighted sample, so the clustering cost
depends on the number of distinct quantized colors, not on image size.
"""

import math

import numpy as np
from loguru import logger

from .errors import AllocationFailureError
from .models import PixelBuffer, WeightedSamples

QUANT_BITS = 5
QUANT_LEVELS = 1 << QUANT_BITS                       # 32
HISTOGRAM_SIZE = QUANT_LEVELS * QUANT_LEVELS * QUANT_LEVELS  # 32768
_LEVEL_MASK = QUANT_LEVELS - 1


def sampling_step(total_pixels: int, pixel_budget: int) -> int:
    """Grid stride keeping roughly ``pixel_budget`` sampled pixels."""
    if pixel_budget <= 0 or total_pixels <= pixel_budget:
        return 1
    return max(1, int(math.ceil(math.sqrt(total_pixels / pixel_budget))))


def quantize_channel(values: np.ndarray) -> np.ndarray:
    """floor(v * 32 / 256) for 8-bit channel values."""
    return (values.astype(np.intp) * QUANT_LEVELS) >> 8


def pack_key(qr: np.ndarray, qg: np.ndarray, qb: np.ndarray) -> np.ndarray:
    return (qr << (QUANT_BITS * 2)) | (qg << QUANT_BITS) | qb


def unpack_key(keys: np.ndarray) -> np.ndarray:
    """Packed histogram keys -> (n, 3) quantization levels."""
    qr = (keys >> (QUANT_BITS * 2)) & _LEVEL_MASK
    qg = (keys >> QUANT_BITS) & _LEVEL_MASK
    qb = keys & _LEVEL_MASK
    return np.stack([qr, qg, qb], axis=1)


def build_weighted_samples(buffer: PixelBuffer, pixel_budget: int,
                           alpha_threshold: int) -> WeightedSamples:
    """
    Build the weighted sample set for one image.

    Args:
        buffer: Decoded RGBA8 image
        pixel_budget: Target number of sampled pixels
        alpha_threshold: Pixels with alpha <= this value are ignored

    Returns:
        WeightedSamples; empty when no sampled pixel passes the alpha filter

    Raises:
        AllocationFailureError: If the histogram or sample arrays cannot be allocated
    """
    step = sampling_step(buffer.pixel_count, pixel_budget)

    try:
        grid = buffer.as_array()[::step, ::step].reshape(-1, 4)
        sampled = int(grid.shape[0])
        accepted = grid[grid[:, 3] > alpha_threshold]

        keys = pack_key(quantize_channel(accepted[:, 0]),
                        quantize_channel(accepted[:, 1]),
                        quantize_channel(accepted[:, 2]))
        counts = np.bincount(keys, minlength=HISTOGRAM_SIZE)

        occupied = np.flatnonzero(counts)
        colors = unpack_key(occupied).astype(np.float64) / float(QUANT_LEVELS - 1)
        weights = counts[occupied].astype(np.int64)
    except MemoryError as e:
        raise AllocationFailureError(f"Could not allocate sampling buffers: {e}") from e

    colors.flags.writeable = False
    weights.flags.writeable = False

    logger.debug(f"Sampled {sampled} pixels with step={step}: "
                 f"{accepted.shape[0]} passed alpha>{alpha_threshold}, "
                 f"{len(weights)} distinct quantized colors")

    return WeightedSamples(
        colors=colors,
        weights=weights,
        step=step,
        sampled_pixels=sampled,
        accepted_pixels=int(accepted.shape[0]),
    )
