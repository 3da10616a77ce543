"""
Color Extraction API Orchestrator

Handles upload and base64 inputs for color extraction. Coordinates decoding,
the extraction pipeline, optional re-ranking and response construction.
"""

import time
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from extract_colors.schemas import (
    ColorExtractResponse, ColorRecordModel, ExtractOptionsModel
)
from extract_colors.services.colors.extraction import run_extraction
from extract_colors.services.colors.models import rank_by_area, rank_by_score
from extract_colors.services.imaging import decode_base64_image, decode_image_bytes
from extract_colors.utils.ids import generate_request_id
from extract_colors.utils.logging import get_logger
from extract_colors.utils.metrics import get_metrics

logger = get_logger()

_RANKERS = {
    "score": rank_by_score,
    "area": rank_by_area,
}


async def handle_extract(
    file_bytes: Optional[bytes] = None,
    image_b64: Optional[str] = None,
    options: Optional[ExtractOptionsModel] = None,
    sort: str = "none"
) -> ColorExtractResponse:
    """
    Main orchestrator for color extraction.

    Args:
        file_bytes: Raw uploaded image bytes
        image_b64: Base64-encoded image (used when no upload is given)
        options: Extraction options
        sort: Post-merge ordering: "none", "score" or "area"

    Returns:
        ColorExtractResponse with the extracted colors

    Raises:
        ValueError: For invalid inputs (including ImageDecodeError)
        AllocationFailureError: When working buffers cannot be allocated
    """
    request_id = generate_request_id("ext")
    start_time = time.time()
    options = options or ExtractOptionsModel()
    metrics = get_metrics()
    metrics.increment_request_count()

    # request_id reaches the pipeline stage logs through the context
    with logger.contextualize(request_id=request_id):
        logger.info("Starting color extraction")

        try:
            if file_bytes is None and image_b64 is None:
                raise ValueError("Either an uploaded 'file' or 'image_b64' must be provided")
            if file_bytes is not None and image_b64 is not None:
                raise ValueError("Cannot specify both 'file' and 'image_b64'")
            if sort != "none" and sort not in _RANKERS:
                raise ValueError(f"Unknown sort '{sort}'. Use none, score or area")

            decode_start = time.time()
            if file_bytes is not None:
                buffer = await run_in_threadpool(decode_image_bytes, file_bytes)
            else:
                buffer = await run_in_threadpool(decode_base64_image, image_b64)
            decode_time = time.time() - decode_start

            result = await run_in_threadpool(run_extraction, buffer, options.to_options())

            records = result.records
            if sort in _RANKERS:
                records = _RANKERS[sort](records)

            total_time = time.time() - start_time
            timings = {"decode": decode_time * 1000, **result.timings_ms, "total": total_time * 1000}

            response = ColorExtractResponse(
                request_id=request_id,
                width=buffer.width,
                height=buffer.height,
                sampled_pixels=result.sampled_pixels,
                accepted_pixels=result.accepted_pixels,
                sort=sort,
                colors=[ColorRecordModel.from_record(r) for r in records],
                options=options,
                timings_ms=timings
            )

            logger.info("Color extraction completed successfully",
                        extra={
                            "dims": f"{buffer.width}x{buffer.height}",
                            "samples": result.sample_count,
                            "k": result.cluster_count,
                            "passes": result.iterations,
                            "colors": len(records),
                            "ms_total": total_time * 1000,
                            "result": "ok"
                        })

            metrics.record_timing("extract", total_time * 1000)
            metrics.record_palette_size(len(records))
            if not records:
                metrics.increment_counter("extract_empty_total")

            return response

        except Exception as e:
            error_time = time.time() - start_time
            logger.error(f"Color extraction failed: {str(e)}",
                         extra={
                             "ms_total": error_time * 1000,
                             "result": "error",
                             "error_type": type(e).__name__
                         })
            metrics.increment_failure_count(type(e).__name__.lower())
            raise
