"""
Stats Router - AI routing counters since process start.
"""

from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tubegrow.ai.monitoring import AIMonitor
from tubegrow.deps import get_ai_monitor


router = APIRouter(prefix="/ai", tags=["ai"])


class AIStatsResponse(BaseModel):
    total_routes: int
    successful_routes: int
    failed_routes: int
    success_rate: str
    total_attempts: int
    total_tokens: int
    avg_attempt_latency_ms: float
    attempts_by_provider: Dict[str, int]
    failures_by_provider: Dict[str, int]
    failures_by_kind: Dict[str, int]
    wins_by_provider: Dict[str, int]


@router.get("/stats", response_model=AIStatsResponse)
async def get_ai_stats(monitor: AIMonitor = Depends(get_ai_monitor)):
    """
    Aggregated routing metrics:
    - routes started / succeeded / failed
    - provider attempts and failures, by provider
    - failures by kind (quota, auth, ...)
    """
    return AIStatsResponse(**monitor.get_stats().to_dict())
