"""
API integration tests for color extraction endpoints.

Tests the complete color extraction API:
- multipart upload mode
- base64 JSON mode
- parameter validation and error handling
- response schema validation
"""

import asyncio
import base64

import pytest

from extract_colors.services.colors.extract_api import handle_extract
from extract_colors.utils.metrics import get_metrics
from generate_test_images import create_solid_image, create_split_image, encode_image


class TestColorExtractAPI:
    """Test the /v1/colors/extract endpoints"""

    @pytest.fixture
    def split_png(self):
        return encode_image(create_split_image(100, 100), "PNG")

    def upload(self, client, png, query=""):
        return client.post(f"/v1/colors/extract{query}",
                           files={"file": ("image.png", png, "image/png")})

    def test_upload_mode(self, test_client, split_png):
        """Upload mode returns both halves with equal area"""
        response = self.upload(test_client, split_png, "?seed=1")

        assert response.status_code == 200
        data = response.json()
        assert data["request_id"].startswith("ext-")
        assert (data["width"], data["height"]) == (100, 100)
        assert data["sampled_pixels"] == 10000
        assert data["accepted_pixels"] == 10000
        assert data["sort"] == "none"
        assert data["options"]["seed"] == 1
        assert {c["hex"] for c in data["colors"]} == {"#ff0000", "#0000ff"}
        assert sum(c["area"] for c in data["colors"]) == pytest.approx(1.0)
        assert list(data["colors"][0]) == [
            "hex", "red", "green", "blue", "hue", "intensity", "lightness", "saturation", "area"
        ]
        assert {"decode", "sampling", "clustering", "merging", "total"} <= set(data["timings_ms"])

    def test_base64_mode(self, test_client):
        """JSON mode accepts base64 and data URLs"""
        png = encode_image(create_solid_image(16, 16, color=(0, 255, 0)), "PNG")
        b64 = base64.b64encode(png).decode("ascii")

        for payload in (b64, f"data:image/png;base64,{b64}"):
            response = test_client.post("/v1/colors/extract/b64", json={"image_b64": payload})
            assert response.status_code == 200
            colors = response.json()["colors"]
            assert [c["hex"] for c in colors] == ["#00ff00"]
            assert colors[0]["area"] == pytest.approx(1.0)

    def test_sort_by_area(self, test_client):
        """sort=area orders colors by decreasing area"""
        rgba = create_split_image(100, 100)
        rgba[:, 30:50, :3] = (0, 0, 255)  # red 30%, blue 70%
        response = self.upload(test_client, encode_image(rgba, "PNG"), "?sort=area&seed=0")

        assert response.status_code == 200
        data = response.json()
        assert data["sort"] == "area"
        assert [c["hex"] for c in data["colors"]] == ["#0000ff", "#ff0000"]
        assert [c["area"] for c in data["colors"]] == pytest.approx([0.7, 0.3])

    def test_transparent_image(self, test_client):
        """Fully transparent images give an empty palette"""
        png = encode_image(create_solid_image(8, 8, alpha=0), "PNG")
        response = self.upload(test_client, png)

        assert response.status_code == 200
        assert response.json()["colors"] == []
        assert get_metrics().get_counters()["extract_empty_total"] == 1

    def test_unsupported_media(self, test_client):
        """Unknown file types return 415"""
        response = self.upload(test_client, b"this is plain text, not an image")

        assert response.status_code == 415
        assert get_metrics().get_counters()["extract_failed_total_unsupportedmediaerror"] == 1

    def test_invalid_base64(self, test_client):
        """Malformed base64 returns 400"""
        response = test_client.post("/v1/colors/extract/b64", json={"image_b64": "@@@not base64@@@"})
        assert response.status_code == 400

    def test_missing_body(self, test_client):
        """Requests without an image fail validation"""
        assert test_client.post("/v1/colors/extract").status_code == 422
        assert test_client.post("/v1/colors/extract/b64", json={}).status_code == 422

    @pytest.mark.parametrize("query", [
        "?max_colors=0",
        "?alpha_threshold=300",
        "?distance=2",
        "?hue_distance=1",
        "?pixels=0",
        "?sort=random",
    ])
    def test_invalid_parameters(self, test_client, split_png, query):
        """Out-of-range query parameters return 422"""
        assert self.upload(test_client, split_png, query).status_code == 422

    def test_large_max_colors_accepted(self, test_client, split_png):
        """max_colors above the distinct color count still succeeds"""
        response = self.upload(test_client, split_png, "?max_colors=500&seed=0")

        assert response.status_code == 200
        data = response.json()
        assert data["options"]["max_colors"] == 500
        assert len(data["colors"]) == 2

    def test_request_metrics(self, test_client, split_png):
        """Successful requests are counted and timed"""
        self.upload(test_client, split_png, "?seed=0")
        self.upload(test_client, split_png, "?seed=0")

        metrics = get_metrics()
        assert metrics.get_counters()["extract_requests_total"] == 2
        assert metrics.get_timing_stats()["extract_duration_ms"]["count"] == 2
        assert metrics.get_palette_size_stats()["max"] == 2


class TestHandleExtract:
    """Test the orchestrator directly"""

    def test_requires_exactly_one_input(self):
        """Neither or both inputs is a ValueError"""
        with pytest.raises(ValueError):
            asyncio.run(handle_extract())
        with pytest.raises(ValueError):
            asyncio.run(handle_extract(file_bytes=b"x" * 20, image_b64="eA=="))

    def test_unknown_sort(self):
        """Unknown orderings are rejected"""
        png = encode_image(create_solid_image(4, 4), "PNG")
        with pytest.raises(ValueError):
            asyncio.run(handle_extract(file_bytes=png, sort="hue"))
