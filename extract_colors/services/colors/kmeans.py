"""
Weighted Lloyd iterations with empty-cluster repair.

Each pass assigns every weighted sample to its nearest centroid, reseeds
clusters that received no weight to the farthest sample of that pass, then
moves every non-empty centroid to its weighted mean. Iteration stops early
once no assignment changes.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from loguru import logger

from .errors import AllocationFailureError
from .utils import pairwise_squared_distances

DEFAULT_ITERATIONS = 12

# Rows per distance block; bounds the (rows, k, 3) temporary.
_ASSIGN_BLOCK = 4096


@dataclass
class ClusterState:
    """Result of the iteration: centroids, final weights and labels."""
    centers: np.ndarray      # (k, 3)
    weights: np.ndarray      # (k,)
    labels: np.ndarray       # (n,)
    iterations: int
    converged: bool


def _assign_range(colors: np.ndarray, weights: np.ndarray, centers: np.ndarray,
                  start: int, stop: int
                  ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Nearest-centroid search for samples ``start:stop``.

    Returns labels, best squared distances and the partial per-cluster
    weighted color sums and weights for that range.
    """
    k = centers.shape[0]
    labels = np.empty(stop - start, dtype=np.intp)
    best_d2 = np.empty(stop - start, dtype=np.float64)

    for lo in range(start, stop, _ASSIGN_BLOCK):
        hi = min(lo + _ASSIGN_BLOCK, stop)
        d2 = pairwise_squared_distances(colors[lo:hi], centers)
        block_labels = np.argmin(d2, axis=1)
        labels[lo - start:hi - start] = block_labels
        best_d2[lo - start:hi - start] = d2[np.arange(hi - lo), block_labels]

    w = weights[start:stop]
    part_weights = np.bincount(labels, weights=w, minlength=k)
    part_sums = np.empty((k, 3), dtype=np.float64)
    for ch in range(3):
        part_sums[:, ch] = np.bincount(labels, weights=w * colors[start:stop, ch], minlength=k)
    return labels, best_d2, part_sums, part_weights


def _chunk_bounds(n: int, parts: int) -> List[Tuple[int, int]]:
    edges = np.linspace(0, n, parts + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def _assign(colors: np.ndarray, weights: np.ndarray, centers: np.ndarray,
            executor: Optional[ThreadPoolExecutor], workers: int):
    n = colors.shape[0]
    if executor is None or workers <= 1:
        return _assign_range(colors, weights, centers, 0, n)

    bounds = _chunk_bounds(n, workers)
    partials = list(executor.map(
        lambda b: _assign_range(colors, weights, centers, b[0], b[1]), bounds
    ))

    # Reduction runs serially in chunk order
    labels = np.concatenate([p[0] for p in partials])
    best_d2 = np.concatenate([p[1] for p in partials])
    sums = np.zeros_like(centers)
    cluster_weights = np.zeros(centers.shape[0], dtype=np.float64)
    for _, _, part_sums, part_weights in partials:
        sums += part_sums
        cluster_weights += part_weights
    return labels, best_d2, sums, cluster_weights


def _repair_empty(colors: np.ndarray, weights: np.ndarray, labels: np.ndarray,
                  best_d2: np.ndarray, sums: np.ndarray,
                  cluster_weights: np.ndarray) -> int:
    """Move the farthest sample into each empty cluster. Returns the number of repairs."""
    repaired = 0
    for c in range(cluster_weights.shape[0]):
        # Earlier repairs in this pass may have emptied this cluster
        if cluster_weights[c] > 0.0:
            continue
        far = int(np.argmax(best_d2))
        old = int(labels[far])
        wi = float(weights[far])
        contribution = wi * colors[far]

        sums[old] -= contribution
        if cluster_weights[old] > 0.0:
            cluster_weights[old] -= wi

        labels[far] = c
        sums[c] += contribution
        cluster_weights[c] += wi
        # The sample now sits on its own centroid
        best_d2[far] = 0.0
        repaired += 1
    return repaired


def run_weighted_kmeans(colors: np.ndarray, weights: np.ndarray, centers: np.ndarray,
                        iterations: int = DEFAULT_ITERATIONS,
                        workers: int = 1) -> ClusterState:
    """
    Refine seeded centroids over weighted samples.

    Args:
        colors: (n, 3) sample colors in [0,1]
        weights: (n,) sample weights (pixel counts)
        centers: (k, 3) seeded centroids; not modified
        iterations: Maximum number of passes
        workers: Threads used for the nearest-centroid search

    Returns:
        ClusterState with the final centroids and accumulated weights

    Raises:
        AllocationFailureError: If scratch buffers cannot be allocated
    """
    n = colors.shape[0]
    k = centers.shape[0]

    try:
        centers = np.array(centers, dtype=np.float64, copy=True)
        w = weights.astype(np.float64)
        labels = np.full(n, -1, dtype=np.intp)
        cluster_weights = np.zeros(k, dtype=np.float64)
    except MemoryError as e:
        raise AllocationFailureError(f"Could not allocate clustering buffers: {e}") from e

    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 and n > 1 else None
    converged = False
    passes = 0
    try:
        for passes in range(1, iterations + 1):
            new_labels, best_d2, sums, cluster_weights = _assign(colors, w, centers, executor, workers)
            changed = bool(np.any(new_labels != labels))
            labels = new_labels

            repaired = _repair_empty(colors, w, labels, best_d2, sums, cluster_weights)
            if repaired:
                changed = True

            nonempty = cluster_weights > 0.0
            centers[nonempty] = sums[nonempty] / cluster_weights[nonempty, None]

            logger.debug(f"k-means pass {passes}: changed={changed}, repaired={repaired}")
            if not changed:
                converged = True
                break
    except MemoryError as e:
        raise AllocationFailureError(f"Could not allocate clustering buffers: {e}") from e
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    return ClusterState(
        centers=centers,
        weights=cluster_weights,
        labels=labels,
        iterations=passes,
        converged=converged,
    )
