"""
Connection warmth tracking per route.

Estimates connection setup overhead from the time a route was last used.
No real connections are held.
"""
import time
from typing import Callable, Dict, Optional


class ConnectionOptimizer:
    """
    Tracks last activity per route and estimates latency overhead.

    - never used: cold start overhead
    - idle longer than the threshold: re-warm overhead
    - otherwise: warm overhead
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        cold_start_ms: int = 400,
        rewarm_ms: int = 250,
        warm_ms: int = 15,
        idle_threshold_seconds: float = 60.0,
    ):
        self._clock = clock
        self.cold_start_ms = cold_start_ms
        self.rewarm_ms = rewarm_ms
        self.warm_ms = warm_ms
        self.idle_threshold_seconds = idle_threshold_seconds
        self._last_active: Dict[str, float] = {}

    def record_active(self, route_id: str) -> None:
        """Mark route as used now."""
        self._last_active[route_id] = self._clock()

    def last_active(self, route_id: str) -> Optional[float]:
        return self._last_active.get(route_id)

    def estimate_overhead(self, route_id: str) -> int:
        """
        Estimate connection overhead for a route.

        Args:
            route_id: Route identifier

        Returns:
            Overhead in milliseconds
        """
        last_active = self._last_active.get(route_id)
        if last_active is None:
            return self.cold_start_ms

        idle_seconds = self._clock() - last_active
        if idle_seconds > self.idle_threshold_seconds:
            return self.rewarm_ms

        return self.warm_ms
