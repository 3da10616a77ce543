"""
Observability endpoints for the color extraction pipeline.

Exposes request counters, stage performance statistics and process health.
"""

from typing import Dict, Any, List
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel
import psutil
import time

from extract_colors.services.observability import get_performance_collector
from extract_colors.utils.metrics import get_metrics


router = APIRouter(prefix="/metrics", tags=["observability"])


class SystemHealthResponse(BaseModel):
    """Process health and resource usage information."""
    timestamp: float
    memory_usage_mb: float
    memory_percent: float
    cpu_percent: float
    uptime_seconds: float
    status: str


class OperationStatsResponse(BaseModel):
    """Performance statistics for a specific pipeline stage."""
    operation_name: str
    total_calls: int
    error_count: int
    error_rate: float
    duration_stats: Dict[str, float]
    memory_stats: Dict[str, float]
    cpu_stats: Dict[str, float]


class MetricsSummaryResponse(BaseModel):
    """Summary of request metrics, stage statistics and process health."""
    requests: Dict[str, Any]
    total_operations: int
    total_errors: int
    overall_error_rate: float
    operations: Dict[str, Dict[str, Any]]
    system_health: SystemHealthResponse


def _system_health() -> SystemHealthResponse:
    process = psutil.Process()
    memory_percent = process.memory_percent()
    cpu_percent = process.cpu_percent()

    status = "healthy"
    if memory_percent > 80 or cpu_percent > 80:
        status = "warning"
    if memory_percent > 95 or cpu_percent > 95:
        status = "critical"

    return SystemHealthResponse(
        timestamp=time.time(),
        memory_usage_mb=process.memory_info().rss / 1024 / 1024,
        memory_percent=memory_percent,
        cpu_percent=cpu_percent,
        uptime_seconds=get_metrics().get_uptime_seconds(),
        status=status
    )


@router.get("/health", response_model=SystemHealthResponse)
async def get_system_health():
    """Get current process health and resource usage."""
    try:
        return _system_health()
    except psutil.Error as e:
        raise HTTPException(status_code=500, detail=f"Failed to get system health: {str(e)}")


@router.get("/operations", response_model=List[str])
async def list_operations():
    """List all tracked pipeline stages."""
    return list(get_performance_collector().get_all_stats()['operations'].keys())


@router.get("/operations/{operation_name}", response_model=OperationStatsResponse)
async def get_operation_stats(operation_name: str):
    """Get performance statistics for a specific pipeline stage."""
    stats = get_performance_collector().get_operation_stats(operation_name)
    if not stats:
        raise HTTPException(
            status_code=404,
            detail=f"No statistics found for operation: {operation_name}"
        )
    return OperationStatsResponse(**stats)


@router.get("/summary", response_model=MetricsSummaryResponse)
async def get_metrics_summary():
    """Get comprehensive metrics summary including process health."""
    all_stats = get_performance_collector().get_all_stats()
    try:
        health = _system_health()
    except psutil.Error as e:
        raise HTTPException(status_code=500, detail=f"Failed to get system health: {str(e)}")

    return MetricsSummaryResponse(
        requests=get_metrics().get_summary(),
        total_operations=all_stats['total_operations'],
        total_errors=all_stats['total_errors'],
        overall_error_rate=all_stats['overall_error_rate'],
        operations=all_stats['operations'],
        system_health=health
    )


@router.get("/recent")
async def get_recent_metrics(limit: int = Query(10, ge=1, le=100)):
    """Get recent stage performance records."""
    recent_metrics = get_performance_collector().get_recent_metrics(limit)
    return {
        "count": len(recent_metrics),
        "metrics": recent_metrics
    }


@router.delete("/reset")
async def reset_metrics():
    """Reset all collected metrics (for testing/debugging)."""
    get_metrics().reset()
    get_performance_collector().reset()
    return {"message": "Metrics reset successfully"}
