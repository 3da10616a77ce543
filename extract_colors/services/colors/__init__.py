"""
Extract-Colors Colors Module

Provides histogram sampling, weighted K-Means clustering and similarity
merging to extract a small palette of representative colors from an image.
"""

__version__ = "1.0.0"

from .errors import (
    AllocationFailureError,
    ImageDecodeError,
    InvalidDimensionsError,
    UnsupportedMediaError,
)
from .extraction import ExtractionResult, extract, run_extraction
from .models import (
    ColorRecord,
    Options,
    PixelBuffer,
    WeightedSamples,
    rank_by_area,
    rank_by_score,
    records_to_json,
)

__all__ = [
    "AllocationFailureError",
    "ImageDecodeError",
    "InvalidDimensionsError",
    "UnsupportedMediaError",
    "ExtractionResult",
    "extract",
    "run_extraction",
    "ColorRecord",
    "Options",
    "PixelBuffer",
    "WeightedSamples",
    "rank_by_area",
    "rank_by_score",
    "records_to_json",
]
