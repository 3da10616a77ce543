"""
Unit tests for color math helpers and the greedy cluster merge.
"""

import numpy as np
import pytest

from extract_colors.services.colors.merging import ColorAggregate, is_similar, merge_clusters
from extract_colors.services.colors.utils import (
    hue_arc_distance, rgb_to_hex, rgb_to_hsl, squared_rgb_distance, unit_to_u8
)

DEFAULT_THRESHOLDS = dict(distance=0.22, hue_distance=1.0 / 12.0,
                          saturation_distance=0.2, lightness_distance=0.2)


class TestColorMath:
    """Test conversion helpers"""

    def test_rgb_to_hsl_primaries(self):
        """Primary colors have full saturation and half lightness"""
        assert rgb_to_hsl(1.0, 0.0, 0.0) == pytest.approx((0.0, 1.0, 0.5))
        assert rgb_to_hsl(0.0, 1.0, 0.0) == pytest.approx((1.0 / 3.0, 1.0, 0.5))
        assert rgb_to_hsl(0.0, 0.0, 1.0) == pytest.approx((2.0 / 3.0, 1.0, 0.5))

    def test_rgb_to_hsl_achromatic(self):
        """Grays have zero hue and saturation"""
        assert rgb_to_hsl(0.0, 0.0, 0.0) == (0.0, 0.0, 0.0)
        assert rgb_to_hsl(0.5, 0.5, 0.5) == (0.0, 0.0, 0.5)
        assert rgb_to_hsl(1.0, 1.0, 1.0) == (0.0, 0.0, 1.0)

    def test_hue_stays_below_one(self):
        """Magenta-leaning reds wrap into [0, 1)"""
        h, _, _ = rgb_to_hsl(1.0, 0.0, 1e-17)
        assert 0.0 <= h < 1.0

    def test_hue_arc_distance_wraps(self):
        """Hue distance is measured the short way round"""
        assert hue_arc_distance(0.1, 0.3) == pytest.approx(0.2)
        assert hue_arc_distance(0.02, 0.98) == pytest.approx(0.04)
        assert hue_arc_distance(0.0, 0.5) == pytest.approx(0.5)

    def test_squared_rgb_distance(self):
        """Black to white is the cube diagonal, squared"""
        assert squared_rgb_distance((0, 0, 0), (1, 1, 1)) == pytest.approx(3.0)
        assert squared_rgb_distance((0.2, 0.2, 0.2), (0.2, 0.2, 0.2)) == 0.0

    def test_unit_to_u8_rounding(self):
        """Channels clamp and round half away from zero"""
        assert unit_to_u8(0.0) == 0
        assert unit_to_u8(1.0) == 255
        assert unit_to_u8(0.5) == 128
        assert unit_to_u8(-0.2) == 0
        assert unit_to_u8(1.3) == 255

    def test_rgb_to_hex(self):
        """Hex strings are lowercase #rrggbb"""
        assert rgb_to_hex((31, 78, 121)) == "#1f4e79"
        assert rgb_to_hex((211, 181, 143)) == "#d3b58f"


class TestIsSimilar:
    """Test the pairwise merge predicate"""

    def test_rgb_condition_is_inclusive(self):
        """Identical colors merge even with every threshold at zero"""
        bucket = ColorAggregate.from_color((0.4, 0.4, 0.4), 1)
        assert is_similar(bucket, (0.4, 0.4, 0.4), rgb_to_hsl(0.4, 0.4, 0.4),
                          distance=0.0, hue_distance=0.0,
                          saturation_distance=0.0, lightness_distance=0.0)

    def test_hsl_condition_needs_all_three(self):
        """Close hue alone does not merge a light and a dark red"""
        bucket = ColorAggregate.from_color((1.0, 0.0, 0.0), 1)
        dark = (0.4, 0.0, 0.0)
        assert not is_similar(bucket, dark, rgb_to_hsl(*dark), distance=0.0,
                              hue_distance=1.0 / 12.0, saturation_distance=0.2,
                              lightness_distance=0.2)


class TestMergeClusters:
    """Test greedy bucket merge"""

    def test_close_colors_merge_by_weighted_average(self):
        """Nearby reds fold into one bucket weighted by pixel count"""
        centers = np.array([[1.0, 0.0, 0.0], [0.95, 0.0, 0.0]])
        buckets = merge_clusters(centers, np.array([3.0, 1.0]), **DEFAULT_THRESHOLDS)

        assert len(buckets) == 1
        assert buckets[0].weight == pytest.approx(4.0)
        assert buckets[0].red == pytest.approx((3.0 + 0.95) / 4.0)

    def test_distinct_colors_heaviest_first(self):
        """Buckets come out in order of discovery, heaviest cluster first"""
        centers = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
        buckets = merge_clusters(centers, np.array([1.0, 5.0]), **DEFAULT_THRESHOLDS)

        assert [b.color for b in buckets] == [(0.0, 0.0, 1.0), (1.0, 0.0, 0.0)]
        assert [b.weight for b in buckets] == [5.0, 1.0]

    def test_equal_weights_keep_cluster_order(self):
        """Ties keep the original cluster order"""
        centers = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
        buckets = merge_clusters(centers, np.array([2.0, 2.0]), **DEFAULT_THRESHOLDS)
        assert [b.color for b in buckets] == [(1.0, 0.0, 0.0), (0.0, 0.0, 1.0)]

    def test_hue_wraps_across_zero(self):
        """Reds at 2 and 358 degrees merge through the HSL condition"""
        centers = np.array([[1.0, 2.0 / 60.0, 0.0], [1.0, 0.0, 2.0 / 60.0]])
        thresholds = dict(DEFAULT_THRESHOLDS, distance=0.0)
        buckets = merge_clusters(centers, np.array([2.0, 1.0]), **thresholds)

        assert len(buckets) == 1
        assert buckets[0].weight == pytest.approx(3.0)

    def test_zero_weight_clusters_skipped(self):
        """Clusters without pixels never produce a bucket"""
        centers = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        buckets = merge_clusters(centers, np.array([2.0, 0.0]), **DEFAULT_THRESHOLDS)

        assert len(buckets) == 1
        assert buckets[0].color == (1.0, 0.0, 0.0)

    def test_absorb_refreshes_hsl(self):
        """Bucket HSL follows the averaged color"""
        bucket = ColorAggregate.from_color((1.0, 1.0, 1.0), 1.0)
        bucket.absorb((0.0, 0.0, 0.0), 1.0)

        assert bucket.color == pytest.approx((0.5, 0.5, 0.5))
        assert bucket.lightness == pytest.approx(0.5)
        assert bucket.saturation == 0.0
