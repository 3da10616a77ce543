"""
Extract-Colors API Schemas
Pydantic models for color extraction request/response validation.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from extract_colors.config import config
from extract_colors.services.colors.models import ColorRecord, Options


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("extract-colors", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")


# ============================================================================
# COLOR EXTRACTION SCHEMAS
# ============================================================================

class ExtractOptionsModel(BaseModel):
    """Extraction options as accepted and echoed by the API."""
    pixels: int = Field(config.DEFAULT_PIXELS, gt=0, description="Target sampled pixel budget")
    distance: float = Field(0.22, ge=0.0, le=1.0, description="Normalized RGB merge distance")
    saturation_distance: float = Field(0.2, ge=0.0, le=1.0, description="Saturation merge threshold")
    lightness_distance: float = Field(0.2, ge=0.0, le=1.0, description="Lightness merge threshold")
    hue_distance: float = Field(1.0 / 12.0, ge=0.0, lt=1.0, description="Hue arc merge threshold (1 = 360 deg)")
    alpha_threshold: int = Field(
        config.DEFAULT_ALPHA_THRESHOLD, ge=0, le=255,
        description="Pixels with alpha <= this value are ignored"
    )
    max_colors: int = Field(config.DEFAULT_MAX_COLORS, ge=1, description="Seed cluster count")
    seed: Optional[int] = Field(None, ge=0, description="Random seed for reproducible output")

    def to_options(self) -> Options:
        return Options(
            pixels=self.pixels,
            distance=self.distance,
            saturation_distance=self.saturation_distance,
            lightness_distance=self.lightness_distance,
            hue_distance=self.hue_distance,
            alpha_threshold=self.alpha_threshold,
            max_colors=self.max_colors,
            seed=self.seed,
        )


class ColorRecordModel(BaseModel):
    """Single extracted color."""
    hex: str = Field(..., pattern=r"^#[0-9a-f]{6}$", description="Hex color code #rrggbb")
    red: int = Field(..., ge=0, le=255)
    green: int = Field(..., ge=0, le=255)
    blue: int = Field(..., ge=0, le=255)
    hue: float = Field(..., ge=0.0, lt=1.0, description="HSL hue (1 = 360 deg)")
    intensity: float = Field(..., ge=0.0, le=1.0, description="Mean of normalized RGB channels")
    lightness: float = Field(..., ge=0.0, le=1.0)
    saturation: float = Field(..., ge=0.0, le=1.0)
    area: float = Field(..., ge=0.0, le=1.0, description="Share of alpha-passing sampled pixels")

    @classmethod
    def from_record(cls, record: ColorRecord) -> "ColorRecordModel":
        return cls(**record.to_dict())


class ColorExtractRequest(BaseModel):
    """JSON request carrying a base64-encoded image."""
    image_b64: str = Field(
        ...,
        min_length=1,
        description="Base64-encoded image (PNG/JPEG/WebP/GIF/BMP), data: URL prefix allowed"
    )


class ColorExtractResponse(BaseModel):
    """Color extraction response."""
    request_id: str = Field(..., description="Request identifier")
    width: int = Field(..., description="Image width in pixels")
    height: int = Field(..., description="Image height in pixels")
    sampled_pixels: int = Field(..., ge=0, description="Pixels visited by the sampling grid")
    accepted_pixels: int = Field(..., ge=0, description="Sampled pixels that passed the alpha filter")
    sort: Literal["none", "score", "area"] = Field("none", description="Ordering applied to colors")
    colors: List[ColorRecordModel] = Field(..., description="Extracted colors")
    options: ExtractOptionsModel = Field(..., description="Options used")
    timings_ms: Dict[str, float] = Field(default_factory=dict, description="Stage durations")
