"""
Color extraction pipeline.

pixel buffer -> weighted samples -> seeded clusters -> converged clusters
-> merged buckets -> color records.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
from loguru import logger

from .kmeans import run_weighted_kmeans
from .merging import ColorAggregate, merge_clusters
from .models import ColorRecord, Options, PixelBuffer
from .sampling import build_weighted_samples
from .seeding import clamp_cluster_count, seed_clusters
from .utils import unit_to_u8
from ..observability import performance_monitor


@dataclass
class ExtractionResult:
    """Records plus the bookkeeping the API reports back."""
    records: List[ColorRecord]
    sampled_pixels: int = 0
    accepted_pixels: int = 0
    sample_count: int = 0
    cluster_count: int = 0
    iterations: int = 0
    converged: bool = False
    step: int = 1
    timings_ms: Dict[str, float] = field(default_factory=dict)


def build_records(buckets: List[ColorAggregate], total_weight: float) -> List[ColorRecord]:
    """Turn merged buckets into output records with area fractions."""
    records = []
    for bucket in buckets:
        area = bucket.weight / total_weight if total_weight > 0.0 else 0.0
        records.append(ColorRecord(
            red=unit_to_u8(bucket.red),
            green=unit_to_u8(bucket.green),
            blue=unit_to_u8(bucket.blue),
            hue=bucket.hue,
            saturation=bucket.saturation,
            lightness=bucket.lightness,
            intensity=(bucket.red + bucket.green + bucket.blue) / 3.0,
            area=min(1.0, max(0.0, area)),
        ))
    return records


def run_extraction(buffer: PixelBuffer, options: Optional[Options] = None,
                   rng: Optional[np.random.Generator] = None) -> ExtractionResult:
    """
    Extract the color palette of an image with full stage bookkeeping.

    Args:
        buffer: Decoded RGBA8 image
        options: Extraction options (defaults when omitted)
        rng: Random source for seeding; built from ``options.seed`` when omitted

    Returns:
        ExtractionResult; ``records`` is empty when no pixel passes the alpha filter

    Raises:
        AllocationFailureError: If working buffers cannot be allocated
    """
    options = options or Options()
    if rng is None:
        rng = np.random.default_rng(options.seed)
    timings: Dict[str, float] = {}

    start = time.perf_counter()
    with performance_monitor("sampling"):
        samples = build_weighted_samples(buffer, options.pixels, options.alpha_threshold)
    timings["sampling"] = (time.perf_counter() - start) * 1000

    if len(samples) == 0:
        logger.info(f"No pixel passed alpha>{options.alpha_threshold}; returning empty palette")
        return ExtractionResult(records=[], sampled_pixels=samples.sampled_pixels,
                                step=samples.step, timings_ms=timings)

    k = clamp_cluster_count(options.max_colors, len(samples))

    start = time.perf_counter()
    with performance_monitor("clustering", sample_count=len(samples), cluster_count=k):
        seeds = seed_clusters(samples.colors, samples.weights, k, rng)
        state = run_weighted_kmeans(samples.colors, samples.weights, seeds,
                                    iterations=options.iterations, workers=options.workers)
    timings["clustering"] = (time.perf_counter() - start) * 1000

    start = time.perf_counter()
    with performance_monitor("merging", cluster_count=k):
        buckets = merge_clusters(
            state.centers, state.weights,
            distance=options.distance,
            hue_distance=options.hue_distance,
            saturation_distance=options.saturation_distance,
            lightness_distance=options.lightness_distance,
        )
        records = build_records(buckets, float(state.weights.sum()))
    timings["merging"] = (time.perf_counter() - start) * 1000

    logger.info(f"Extracted {len(records)} colors from {len(samples)} samples "
                f"(k={k}, passes={state.iterations}, converged={state.converged})")

    return ExtractionResult(
        records=records,
        sampled_pixels=samples.sampled_pixels,
        accepted_pixels=samples.accepted_pixels,
        sample_count=len(samples),
        cluster_count=k,
        iterations=state.iterations,
        converged=state.converged,
        step=samples.step,
        timings_ms=timings,
    )


def extract(buffer: PixelBuffer, options: Optional[Options] = None,
            rng: Optional[np.random.Generator] = None) -> List[ColorRecord]:
    """Extract the ordered list of representative colors of an image."""
    return run_extraction(buffer, options, rng).records
