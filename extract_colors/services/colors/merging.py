"""
Greedy similarity merge of converged clusters.

Clusters are visited heaviest first; each one joins the first existing bucket
that is close either in RGB or in all three HSL channels at once, otherwise it
opens a new bucket. The result depends on visiting order by construction.
"""

from dataclasses import dataclass
from typing import List

import numpy as np
from loguru import logger

from .utils import hue_arc_distance, rgb_to_hsl, squared_rgb_distance


@dataclass
class ColorAggregate:
    """A merged bucket: running-average color, total weight and cached HSL."""
    red: float
    green: float
    blue: float
    weight: float
    hue: float
    saturation: float
    lightness: float

    @classmethod
    def from_color(cls, color, weight: float) -> "ColorAggregate":
        r, g, b = (float(c) for c in color)
        h, s, l = rgb_to_hsl(r, g, b)
        return cls(r, g, b, float(weight), h, s, l)

    @property
    def color(self):
        return (self.red, self.green, self.blue)

    def absorb(self, color, weight: float) -> None:
        """Fold another weighted color into the running average and refresh HSL."""
        total = self.weight + weight
        if total > 0.0:
            self.red = (self.red * self.weight + float(color[0]) * weight) / total
            self.green = (self.green * self.weight + float(color[1]) * weight) / total
            self.blue = (self.blue * self.weight + float(color[2]) * weight) / total
        self.weight = total
        self.hue, self.saturation, self.lightness = rgb_to_hsl(self.red, self.green, self.blue)


def is_similar(bucket: ColorAggregate, color, hsl, *, distance: float,
               hue_distance: float, saturation_distance: float,
               lightness_distance: float) -> bool:
    """RGB distance within ``distance`` (normalized), or H, S and L all within their thresholds."""
    if squared_rgb_distance(color, bucket.color) <= distance * distance * 3.0:
        return True
    h, s, l = hsl
    return (hue_arc_distance(h, bucket.hue) < hue_distance
            and abs(s - bucket.saturation) < saturation_distance
            and abs(l - bucket.lightness) < lightness_distance)


def merge_clusters(centers: np.ndarray, weights: np.ndarray, *, distance: float,
                   hue_distance: float, saturation_distance: float,
                   lightness_distance: float) -> List[ColorAggregate]:
    """
    Merge clusters into buckets.

    Args:
        centers: (k, 3) cluster centroids in [0,1]
        weights: (k,) accumulated cluster weights
        distance: Normalized RGB distance threshold
        hue_distance: Hue arc threshold (fraction of the hue circle)
        saturation_distance: Saturation difference threshold
        lightness_distance: Lightness difference threshold

    Returns:
        Buckets in discovery order. Zero-weight clusters are skipped.
    """
    order = np.argsort(-np.asarray(weights, dtype=np.float64), kind='stable')
    buckets: List[ColorAggregate] = []

    for idx in order:
        w = float(weights[idx])
        if w <= 0.0:
            continue
        color = centers[idx]
        hsl = rgb_to_hsl(float(color[0]), float(color[1]), float(color[2]))

        for bucket in buckets:
            if is_similar(bucket, color, hsl, distance=distance, hue_distance=hue_distance,
                          saturation_distance=saturation_distance,
                          lightness_distance=lightness_distance):
                bucket.absorb(color, w)
                break
        else:
            buckets.append(ColorAggregate.from_color(color, w))

    logger.debug(f"Merged {len(order)} clusters into {len(buckets)} colors")
    return buckets
