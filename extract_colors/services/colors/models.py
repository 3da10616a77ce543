"""
Value objects passed between the extraction stages.

PixelBuffer and Options go in, ColorRecord comes out; WeightedSamples is the
hand-off between sampling and clustering.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import numpy as np

from extract_colors.config import config
from .errors import InvalidDimensionsError
from .utils import rgb_to_hex


@dataclass(frozen=True)
class PixelBuffer:
    """
    Decoded RGBA8 image, row-major, stride = width * 4.

    ``data`` may be raw bytes or a uint8 array of shape (height, width, 4).
    """
    width: int
    height: int
    data: Union[bytes, bytearray, memoryview, np.ndarray] = field(repr=False)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidDimensionsError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * 4
        actual = self.data.size if isinstance(self.data, np.ndarray) else len(self.data)
        if actual != expected:
            raise InvalidDimensionsError(
                f"RGBA buffer holds {actual} bytes, expected {expected} "
                f"for {self.width}x{self.height}"
            )

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "PixelBuffer":
        """Wrap an (H, W, 4) uint8 array."""
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise InvalidDimensionsError(f"Expected (H, W, 4) RGBA array, got shape {rgba.shape}")
        return cls(width=int(rgba.shape[1]), height=int(rgba.shape[0]),
                   data=np.ascontiguousarray(rgba, dtype=np.uint8))

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def as_array(self) -> np.ndarray:
        """View the buffer as a (height, width, 4) uint8 array without copying."""
        if isinstance(self.data, np.ndarray):
            return self.data.reshape(self.height, self.width, 4)
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)


@dataclass(frozen=True)
class Options:
    """Configuration for one extraction run."""
    pixels: int = config.DEFAULT_PIXELS
    distance: float = 0.22
    saturation_distance: float = 0.2
    lightness_distance: float = 0.2
    hue_distance: float = 1.0 / 12.0
    alpha_threshold: int = config.DEFAULT_ALPHA_THRESHOLD
    max_colors: int = config.DEFAULT_MAX_COLORS
    iterations: int = config.KMEANS_ITERATIONS
    seed: Optional[int] = None
    workers: int = config.WORKERS

    def __post_init__(self):
        if not config.validate_pixels(self.pixels):
            raise ValueError(f"pixels must be > 0, got {self.pixels}")
        if not config.validate_max_colors(self.max_colors):
            raise ValueError(f"max_colors must be >= 1, got {self.max_colors}")
        if not config.validate_alpha_threshold(self.alpha_threshold):
            raise ValueError(f"alpha_threshold must be in [0, 255], got {self.alpha_threshold}")
        for name in ("distance", "saturation_distance", "lightness_distance"):
            if not config.validate_unit_interval(getattr(self, name)):
                raise ValueError(f"{name} must be in [0, 1], got {getattr(self, name)}")
        if not config.validate_unit_interval(self.hue_distance, closed=False):
            raise ValueError(f"hue_distance must be in [0, 1), got {self.hue_distance}")
        if self.iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {self.iterations}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")


@dataclass(frozen=True)
class WeightedSamples:
    """Non-empty quantization buckets: colors (n, 3) in [0,1] and pixel counts (n,)."""
    colors: np.ndarray
    weights: np.ndarray
    step: int
    sampled_pixels: int
    accepted_pixels: int

    def __len__(self) -> int:
        return int(self.weights.shape[0])

    @property
    def total_weight(self) -> int:
        return int(self.weights.sum())


@dataclass(frozen=True)
class ColorRecord:
    """One extracted color."""
    red: int
    green: int
    blue: int
    hue: float
    saturation: float
    lightness: float
    intensity: float
    area: float

    @property
    def hex(self) -> str:
        return rgb_to_hex((self.red, self.green, self.blue))

    @property
    def score(self) -> float:
        """Secondary ranking score favouring bright, non-dominant accents."""
        return (self.intensity + 0.1) * (0.9 - self.area)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hex": self.hex,
            "red": self.red,
            "green": self.green,
            "blue": self.blue,
            "hue": self.hue,
            "intensity": self.intensity,
            "lightness": self.lightness,
            "saturation": self.saturation,
            "area": self.area,
        }


def records_to_json(records: List[ColorRecord], indent: Optional[int] = 2) -> str:
    """Serialize records as a JSON array."""
    return json.dumps([r.to_dict() for r in records], indent=indent)


def rank_by_score(records: List[ColorRecord]) -> List[ColorRecord]:
    """Sorted copy, highest ``(intensity + 0.1) * (0.9 - area)`` first."""
    return sorted(records, key=lambda r: r.score, reverse=True)


def rank_by_area(records: List[ColorRecord]) -> List[ColorRecord]:
    """Sorted copy, largest area first."""
    return sorted(records, key=lambda r: r.area, reverse=True)
