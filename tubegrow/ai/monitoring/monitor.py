"""
AI Monitor - Structured logging and in-memory stats for routed requests.

Every route() call produces a short trail of JSON log lines:

    route_start       task, language, candidate order
    provider_attempt  one per adapter invocation (success or failure kind)
    route_success     winning provider, failures skipped on the way
    route_failed      terminal router error

The same calls update thread-safe counters served by GET /ai/stats.
Prompts are logged as length + short preview; credentials never.

Usage:
    from tubegrow.ai.monitoring import ai_monitor

    ai_monitor.track_route_start(request_id, request, candidates)
    ai_monitor.track_attempt(request_id, result)
    stats = ai_monitor.get_stats()
"""

import json
import logging
import sys
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional

from tubegrow.core.config import settings
from tubegrow.ai.errors import RouterError
from tubegrow.ai.providers.base import ProviderResult, ProviderType
from tubegrow.ai.schemas.request import CanonicalRequest


# ---------------------------------------------------------------------------
# LOGGING SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("tubegrow")
logger.setLevel(settings.LOG_LEVEL.upper())

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(handler)

ai_log = logging.getLogger("tubegrow.ai.monitor")


# ---------------------------------------------------------------------------
# METRICS
# ---------------------------------------------------------------------------
@dataclass
class AggregatedMetrics:
    """Counters since process start (or last reset)."""
    total_routes: int = 0
    successful_routes: int = 0
    failed_routes: int = 0
    total_attempts: int = 0
    total_tokens: int = 0
    total_latency_ms: float = 0.0
    attempts_by_provider: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    failures_by_provider: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    failures_by_kind: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    wins_by_provider: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    @property
    def avg_attempt_latency_ms(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.total_latency_ms / self.total_attempts

    @property
    def success_rate(self) -> float:
        finished = self.successful_routes + self.failed_routes
        if finished == 0:
            return 0.0
        return (self.successful_routes / finished) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_routes": self.total_routes,
            "successful_routes": self.successful_routes,
            "failed_routes": self.failed_routes,
            "success_rate": f"{self.success_rate:.1f}%",
            "total_attempts": self.total_attempts,
            "total_tokens": self.total_tokens,
            "avg_attempt_latency_ms": round(self.avg_attempt_latency_ms, 2),
            "attempts_by_provider": dict(self.attempts_by_provider),
            "failures_by_provider": dict(self.failures_by_provider),
            "failures_by_kind": dict(self.failures_by_kind),
            "wins_by_provider": dict(self.wins_by_provider),
        }


# ---------------------------------------------------------------------------
# UNIFIED AI MONITOR
# ---------------------------------------------------------------------------
class AIMonitor:
    """Logging + metrics in one call per routing event."""

    def __init__(self):
        self._logger = ai_log
        self._lock = Lock()
        self._aggregated = AggregatedMetrics()

    def track_route_start(
        self,
        request_id: str,
        request: CanonicalRequest,
        candidates: List[ProviderType],
    ) -> None:
        prompt = request.user_prompt
        self._emit(logging.INFO, "route_start", request_id, {
            "task": request.task.value,
            "language": request.language.value,
            "response_shape": request.response_shape.value,
            "attachments": sorted(request.attachment_kinds),
            "candidates": [p.value for p in candidates],
            "prompt_length": len(prompt),
            "prompt_preview": prompt[:100] + "..." if len(prompt) > 100 else prompt,
        })
        with self._lock:
            self._aggregated.total_routes += 1

    def track_attempt(self, request_id: str, result: ProviderResult) -> None:
        data: Dict[str, Any] = {
            "provider": result.provider.value,
            "model": result.model,
            "success": result.success,
            "latency_ms": round(result.latency_ms, 2),
            "tokens": result.usage.total_tokens,
        }
        if not result.success:
            data["error_kind"] = result.error_kind.value if result.error_kind else None
            data["error"] = result.error

        level = logging.INFO if result.success else logging.WARNING
        self._emit(level, "provider_attempt", request_id, data)

        with self._lock:
            agg = self._aggregated
            agg.total_attempts += 1
            agg.total_tokens += result.usage.total_tokens
            agg.total_latency_ms += result.latency_ms
            agg.attempts_by_provider[result.provider.value] += 1
            if not result.success:
                agg.failures_by_provider[result.provider.value] += 1
                kind = result.error_kind.value if result.error_kind else "unknown"
                agg.failures_by_kind[kind] += 1

    def track_route_success(
        self, request_id: str, provider: ProviderType, skipped_failures: int
    ) -> None:
        self._emit(logging.INFO, "route_success", request_id, {
            "provider": provider.value,
            "failed_before_success": skipped_failures,
        })
        with self._lock:
            self._aggregated.successful_routes += 1
            self._aggregated.wins_by_provider[provider.value] += 1

    def track_route_failure(self, request_id: str, error: RouterError) -> None:
        self._emit(logging.ERROR, "route_failed", request_id, {
            "code": error.code,
            "error": error.message,
            "failures": [f.to_dict() for f in error.failures],
        })
        with self._lock:
            self._aggregated.failed_routes += 1

    def get_stats(self) -> AggregatedMetrics:
        with self._lock:
            return self._aggregated

    def reset(self) -> None:
        with self._lock:
            self._aggregated = AggregatedMetrics()

    def _emit(
        self,
        level: int,
        event: str,
        request_id: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        log_data = {
            "event": event,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if data:
            log_data.update(data)
        self._logger.log(level, f"AI Event: {json.dumps(log_data, default=str)}")


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
ai_monitor = AIMonitor()
