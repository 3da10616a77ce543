"""
Extract-Colors v1 API Routes
Implements the /v1/colors/extract endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from extract_colors.config import config
from extract_colors.schemas import (
    ColorExtractRequest, ColorExtractResponse, ErrorResponse, ExtractOptionsModel
)
from extract_colors.services.colors.errors import AllocationFailureError, UnsupportedMediaError
from extract_colors.services.colors.extract_api import handle_extract

router = APIRouter(prefix="/v1", tags=["Color Extraction"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    415: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def extract_options(
    pixels: int = Query(config.DEFAULT_PIXELS, gt=0, description="Target sampled pixel budget"),
    distance: float = Query(0.22, ge=0.0, le=1.0, description="Normalized RGB merge distance"),
    saturation_distance: float = Query(0.2, ge=0.0, le=1.0, description="Saturation merge threshold"),
    lightness_distance: float = Query(0.2, ge=0.0, le=1.0, description="Lightness merge threshold"),
    hue_distance: float = Query(1.0 / 12.0, ge=0.0, lt=1.0, description="Hue arc merge threshold"),
    alpha_threshold: int = Query(config.DEFAULT_ALPHA_THRESHOLD, ge=0, le=255,
                                 description="Ignore pixels with alpha <= threshold"),
    max_colors: int = Query(config.DEFAULT_MAX_COLORS, ge=1, description="Seed cluster count"),
    seed: Optional[int] = Query(None, ge=0, description="Random seed for reproducible output"),
) -> ExtractOptionsModel:
    """Collect extraction options from query parameters."""
    return ExtractOptionsModel(
        pixels=pixels,
        distance=distance,
        saturation_distance=saturation_distance,
        lightness_distance=lightness_distance,
        hue_distance=hue_distance,
        alpha_threshold=alpha_threshold,
        max_colors=max_colors,
        seed=seed,
    )


async def _run(file_bytes: Optional[bytes], image_b64: Optional[str],
               options: ExtractOptionsModel, sort: str) -> ColorExtractResponse:
    try:
        return await handle_extract(file_bytes=file_bytes, image_b64=image_b64,
                                    options=options, sort=sort)
    except UnsupportedMediaError as e:
        raise HTTPException(status_code=415, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AllocationFailureError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/colors/extract",
             response_model=ColorExtractResponse,
             responses=_ERROR_RESPONSES,
             summary="Extract colors from an uploaded image")
async def extract_colors_upload(
    file: UploadFile = File(..., description="Image file"),
    options: ExtractOptionsModel = Depends(extract_options),
    sort: str = Query("none", pattern="^(none|score|area)$", description="Ordering of returned colors"),
) -> ColorExtractResponse:
    """Multipart upload mode."""
    file_bytes = await file.read()
    return await _run(file_bytes, None, options, sort)


@router.post("/colors/extract/b64",
             response_model=ColorExtractResponse,
             responses=_ERROR_RESPONSES,
             summary="Extract colors from a base64-encoded image")
async def extract_colors_b64(
    body: ColorExtractRequest,
    options: ExtractOptionsModel = Depends(extract_options),
    sort: str = Query("none", pattern="^(none|score|area)$", description="Ordering of returned colors"),
) -> ColorExtractResponse:
    """JSON mode."""
    return await _run(None, body.image_b64, options, sort)
