"""
Extract-Colors Configuration
Manages environment variables and defaults for the extraction service.
"""
import os
from typing import List


class Config:
    """Configuration class for the extract-colors service."""

    # Upload and decode limits
    MAX_FILE_MB: int = int(os.environ.get("EXTRACT_COLORS_MAX_FILE_MB", "10"))
    MAX_PIXELS: int = int(os.environ.get("EXTRACT_COLORS_MAX_PIXELS", "40000000"))

    # Extraction defaults
    DEFAULT_PIXELS: int = int(os.environ.get("EXTRACT_COLORS_DEFAULT_PIXELS", "64000"))
    DEFAULT_MAX_COLORS: int = int(os.environ.get("EXTRACT_COLORS_DEFAULT_MAX_COLORS", "16"))
    DEFAULT_ALPHA_THRESHOLD: int = int(os.environ.get("EXTRACT_COLORS_DEFAULT_ALPHA_THRESHOLD", "250"))
    KMEANS_ITERATIONS: int = int(os.environ.get("EXTRACT_COLORS_KMEANS_ITERATIONS", "12"))
    WORKERS: int = int(os.environ.get("EXTRACT_COLORS_WORKERS", "1"))

    # Logging
    LOG_LEVEL: str = os.environ.get("EXTRACT_COLORS_LOG_LEVEL", "INFO")
    LOG_JSON: bool = bool(int(os.environ.get("EXTRACT_COLORS_LOG_JSON", "0")))

    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("EXTRACT_COLORS_METRICS_ENABLED", "1")))

    # Supported image formats
    SUPPORTED_MIME_TYPES: List[str] = [
        "image/png", "image/jpeg", "image/webp", "image/gif", "image/bmp"
    ]

    @classmethod
    def validate_pixels(cls, pixels: int) -> bool:
        """Validate sample pixel budget."""
        return pixels > 0

    @classmethod
    def validate_max_colors(cls, max_colors: int) -> bool:
        """Validate the seed cluster count."""
        return max_colors >= 1

    @classmethod
    def validate_alpha_threshold(cls, alpha_threshold: int) -> bool:
        """Validate alpha inclusion threshold."""
        return 0 <= alpha_threshold <= 255

    @classmethod
    def validate_unit_interval(cls, value: float, closed: bool = True) -> bool:
        """Validate a similarity threshold in [0,1] (or [0,1) when not closed)."""
        if closed:
            return 0.0 <= value <= 1.0
        return 0.0 <= value < 1.0


# Global config instance
config = Config()
