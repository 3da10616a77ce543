"""
Test health and observability endpoints.
"""
from generate_test_images import create_split_image, encode_image


def test_health_check(test_client):
    """Health check reports service and version."""
    response = test_client.get("/healthz")

    assert response.status_code == 200
    data = response.json()

    assert data["ok"] is True
    assert data["version"] == "1.0.0"
    assert data["service"] == "extract-colors"


def test_root(test_client):
    """Root endpoint points at the docs."""
    response = test_client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_metrics_health(test_client):
    """Process health is reported with a status."""
    response = test_client.get("/api/metrics/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] in ("healthy", "warning", "critical")
    assert data["memory_usage_mb"] > 0


def test_metrics_summary_after_extraction(test_client):
    """Stage statistics appear once an extraction ran."""
    png = encode_image(create_split_image(20, 20), "PNG")
    test_client.post("/v1/colors/extract?seed=0", files={"file": ("a.png", png, "image/png")})

    response = test_client.get("/api/metrics/summary")
    assert response.status_code == 200
    data = response.json()

    assert data["requests"]["counters"]["extract_requests_total"] == 1
    assert {"sampling", "clustering", "merging"} <= set(data["operations"])
    assert data["total_errors"] == 0

    stage = test_client.get("/api/metrics/operations/clustering")
    assert stage.status_code == 200
    assert stage.json()["total_calls"] == 1


def test_unknown_operation(test_client):
    """Unknown stages return 404."""
    assert test_client.get("/api/metrics/operations/segmentation").status_code == 404


def test_reset(test_client):
    """Reset clears the collected stage statistics."""
    png = encode_image(create_split_image(20, 20), "PNG")
    test_client.post("/v1/colors/extract", files={"file": ("a.png", png, "image/png")})

    assert test_client.delete("/api/metrics/reset").status_code == 200
    assert test_client.get("/api/metrics/operations").json() == []
    assert test_client.get("/api/metrics/recent").json()["count"] == 0
