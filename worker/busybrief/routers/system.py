from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..models.brief import HealthResponse, MetricsResponse
from ..state import State, get_state

# Unversioned: pinged by load balancers and exempt from auth
health_router = APIRouter(tags=["system"])
router = APIRouter(tags=["system"])


@health_router.get("/health", response_model=HealthResponse)
def health(state: State = Depends(get_state)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        model=state.pipeline.model,
        hasApiKey=state.pipeline.has_client,
        contract=state.pipeline.contract.name,
    )


@router.get("/metrics", response_model=MetricsResponse)
def v1_metrics(state: State = Depends(get_state)) -> MetricsResponse:
    return MetricsResponse(**state.metrics.snapshot())
