"""
Weighted K-Means++ seeding.

The next centroid is drawn with probability proportional to
``weight * squared distance to the nearest chosen centroid``, so a bucket
holding many pixels is proportionally more likely to seed a cluster than a
rare color at the same distance.
"""

import numpy as np
from loguru import logger


def clamp_cluster_count(requested: int, sample_count: int) -> int:
    """K is never larger than the number of samples and never below 1."""
    return max(1, min(requested, sample_count))


def seed_clusters(colors: np.ndarray, weights: np.ndarray, k: int,
                  rng: np.random.Generator) -> np.ndarray:
    """
    Pick initial centroids among the samples.

    Args:
        colors: (n, 3) sample colors
        weights: (n,) sample pixel counts
        k: Requested cluster count, clamped to [1, n]
        rng: Random source

    Returns:
        (k, 3) float64 centroids
    """
    n = colors.shape[0]
    if n == 0:
        raise ValueError("Cannot seed clusters from an empty sample set")
    k = clamp_cluster_count(k, n)

    w = weights.astype(np.float64)
    centers = np.empty((k, 3), dtype=np.float64)
    centers[0] = colors[rng.integers(n)]

    diff = colors - centers[0]
    nearest_d2 = np.einsum('nc,nc->n', diff, diff)

    for c in range(1, k):
        scores = w * nearest_d2
        total = float(scores.sum())
        if total <= 0.0:
            # Every sample coincides with a chosen centroid
            idx = int(rng.integers(n))
        else:
            cumulative = np.cumsum(scores)
            target = rng.random() * total
            idx = min(int(np.searchsorted(cumulative, target, side='right')), n - 1)
        centers[c] = colors[idx]

        diff = colors - centers[c]
        np.minimum(nearest_d2, np.einsum('nc,nc->n', diff, diff), out=nearest_d2)

    logger.debug(f"Seeded {k} clusters from {n} weighted samples")
    return centers
