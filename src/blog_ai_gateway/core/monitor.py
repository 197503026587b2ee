"""
Performance monitor for provider requests.

Tracks request counters and a bounded history of response times, and
derives health advice from them.
"""

import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

SLOW_RESPONSE_MS = 5000
LOW_CACHE_HIT_RATE = 20.0
LOW_SUCCESS_RATE = 95.0
RECENT_SLOWDOWN_FACTOR = 1.5


@dataclass
class RequestTrace:
    """Start marker for one request."""
    request_id: str
    start_time: float


@dataclass
class RequestOutcome:
    """What end() recorded for one request."""
    response_time: float
    success: bool
    from_cache: bool


class PerformanceMetrics(BaseModel):
    """Snapshot of the monitor counters."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    total_response_time: float = 0.0
    average_response_time: float = 0.0
    recent_average_response_time: float = 0.0
    cache_hit_rate: float = 0.0
    success_rate: float = 0.0
    history: List[float] = Field(default_factory=list)


class PerformanceMonitor:
    """
    Request performance tracker.

    Response times are in milliseconds. Only end() and reset() mutate state.
    """

    def __init__(
        self,
        history_size: int = 100,
        recent_window: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.history_size = history_size
        self.recent_window = recent_window
        self._clock = clock
        self._reset_state()

    def _reset_state(self) -> None:
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.cache_hits = 0
        self.cache_misses = 0
        self.total_response_time = 0.0
        self.average_response_time = 0.0
        self._history: Deque[float] = deque(maxlen=self.history_size)

    def start(self) -> RequestTrace:
        return RequestTrace(request_id=uuid.uuid4().hex[:12], start_time=self._clock())

    def end(self, trace: RequestTrace, success: bool = True, from_cache: bool = False) -> RequestOutcome:
        """Record the completion of a request started with start()."""
        response_time = (self._clock() - trace.start_time) * 1000.0

        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1

        if from_cache:
            self.cache_hits += 1
        else:
            self.cache_misses += 1

        self._history.append(response_time)
        self.total_response_time += response_time
        self.average_response_time = self.total_response_time / self.total_requests

        logger.info(
            f"AI request finished [{trace.request_id}]: {response_time:.0f}ms, "
            f"success: {success}, cache: {from_cache}"
        )

        return RequestOutcome(response_time=response_time, success=success, from_cache=from_cache)

    def get_metrics(self) -> PerformanceMetrics:
        recent = list(self._history)[-self.recent_window:]
        recent_average = sum(recent) / len(recent) if recent else 0.0

        cache_hit_rate = 0.0
        success_rate = 0.0
        if self.total_requests:
            cache_hit_rate = round(self.cache_hits / self.total_requests * 100, 2)
            success_rate = round(self.successful_requests / self.total_requests * 100, 2)

        return PerformanceMetrics(
            total_requests=self.total_requests,
            successful_requests=self.successful_requests,
            failed_requests=self.failed_requests,
            cache_hits=self.cache_hits,
            cache_misses=self.cache_misses,
            total_response_time=self.total_response_time,
            average_response_time=self.average_response_time,
            recent_average_response_time=round(recent_average),
            cache_hit_rate=cache_hit_rate,
            success_rate=success_rate,
            history=list(self._history),
        )

    def get_performance_advice(self) -> List[str]:
        """Textual hints derived from the current metrics."""
        metrics = self.get_metrics()
        advice = []

        if metrics.total_requests == 0:
            return advice

        if metrics.average_response_time > SLOW_RESPONSE_MS:
            advice.append(
                "Average response time is high; check the network connection "
                "or reduce the request content length"
            )

        if metrics.cache_hit_rate < LOW_CACHE_HIT_RATE:
            advice.append("Cache hit rate is low; consider tuning the cache key or TTL")

        if metrics.success_rate < LOW_SUCCESS_RATE:
            advice.append("Request success rate is low; check the API credentials and network stability")

        if metrics.recent_average_response_time > metrics.average_response_time * RECENT_SLOWDOWN_FACTOR:
            advice.append("Recent response times have grown noticeably; check the provider service status")

        return advice

    def reset(self) -> None:
        self._reset_state()
        logger.info("AI performance metrics reset")
