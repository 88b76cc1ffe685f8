"""
Inference Router.

Resolves a chat message to an InferenceResult: route selection,
cache-first lookup, backend call and cost/latency accounting.
"""
import asyncio
import dataclasses
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

from .backend import GenerationBackend
from .connection_optimizer import ConnectionOptimizer
from .errors import BackendUnavailable, InvalidInput
from .inference_cache import InferenceCache
from .models import (
    GenerationRequest,
    GenerationResponse,
    InferenceMetrics,
    InferenceResult,
    Route,
)
from .routing import BASE_THROUGHPUT, build_cache_key, classify_complexity, select_route
from .tools import DEFAULT_HUB_IDS, TOOL_MANIFEST, build_system_instruction


logger = logging.getLogger(__name__)


class InferenceRouter:
    """
    Routes chat messages to model routes with caching.

    Flow:
    1. Classify message complexity and select a route
    2. Return a cached result if one is still valid
    3. Otherwise call the backend, account latency and cost, cache the result

    Backend failures never propagate: the caller gets a fallback result.
    Only InvalidInput is raised.

    Concurrent misses for the same key each call the backend; the last
    write to the cache wins.
    """

    BOOSTED_TEMPERATURE: float = 0.7
    EDGE_TEMPERATURE: float = 0.3
    BOOSTED_THINKING_BUDGET: int = 16384

    CACHE_HIT_LATENCY_MS: float = 15
    CACHE_HIT_TTFT_MS: float = 5
    MIN_TTFT_MS: float = 20
    TTFT_RATIO: float = 0.15

    # Rough token estimate: 1 token ~ 4 characters
    CHARS_PER_TOKEN: int = 4

    ACCELERATED_CLUSTER = "H100-DGX-CLUSTER"
    EDGE_CLUSTER = "EDGE-TPU-NODE"

    EMPTY_RESPONSE_TEXT = "Orchestration Fault: Empty response."
    FALLBACK_TEXT = (
        "The federated gateway is experiencing upstream latency. Rerouting packet..."
    )
    FALLBACK_MODEL = "Fallback"
    FALLBACK_PROVIDER = "System"
    FALLBACK_CLUSTER = "Local Fallback"

    def __init__(
        self,
        backend: GenerationBackend,
        cache: Optional[InferenceCache] = None,
        connections: Optional[ConnectionOptimizer] = None,
        backend_timeout_seconds: Optional[float] = 8.0,
        default_throughput: float = BASE_THROUGHPUT,
        hub_ids: Sequence[str] = DEFAULT_HUB_IDS,
        log_dir: Optional[str] = None,
        timer: Callable[[], float] = time.perf_counter,
    ):
        """
        Args:
            backend: Generation backend
            cache: Result cache (a default one is created if omitted)
            connections: Connection optimizer (created if omitted)
            backend_timeout_seconds: Timeout for one backend call (None = no timeout)
            default_throughput: Throughput reported when no hint is given
            hub_ids: Hubs listed in the system instruction
            log_dir: Directory for JSONL logs (optional)
            timer: Wall clock in seconds for latency measurement
        """
        self.backend = backend
        self.cache = cache if cache is not None else InferenceCache()
        self.connections = connections if connections is not None else ConnectionOptimizer()
        self.backend_timeout_seconds = backend_timeout_seconds
        self.default_throughput = default_throughput
        self.hub_ids = tuple(hub_ids)
        self.log_dir = log_dir
        self._timer = timer

        logger.info(
            f"Initialized InferenceRouter (ttl={self.cache.ttl_seconds}s, "
            f"max_size={self.cache.max_size}, timeout={backend_timeout_seconds}s)"
        )

    async def resolve(
        self,
        message: str,
        is_boosted: bool = False,
        throughput_hint: Optional[float] = None,
    ) -> InferenceResult:
        """
        Resolve a chat message to a response.

        Args:
            message: User message
            is_boosted: Use the accelerated tier
            throughput_hint: Cluster throughput to report (TFLOPS)

        Returns:
            InferenceResult (fallback result if the backend fails)

        Raises:
            InvalidInput: If message is empty or whitespace only
        """
        start_time = self._timer()

        trimmed = (message or "").strip()
        if not trimmed:
            raise InvalidInput("message must not be empty")

        throughput = self.default_throughput if throughput_hint is None else throughput_hint

        complexity = classify_complexity(trimmed)
        route = select_route(complexity, is_boosted)
        logger.debug(f"Selected route {route.id} ({complexity.value}, boosted={is_boosted})")

        cache_key = build_cache_key(route, message)
        cached_result = self.cache.get(cache_key)
        if cached_result is not None:
            logger.debug(f"Cache hit: {cache_key}")
            self.connections.record_active(route.id)
            result = self._as_cache_hit(cached_result)
            self._log_inference(route, result)
            return result

        logger.debug(f"Cache miss: {cache_key}")
        overhead = self.connections.estimate_overhead(route.id)
        request = GenerationRequest(
            target_model=route.backing_model,
            prompt=message,
            system_instruction=build_system_instruction(route, throughput, self.hub_ids),
            tools=list(TOOL_MANIFEST),
            temperature=self.BOOSTED_TEMPERATURE if is_boosted else self.EDGE_TEMPERATURE,
            thinking_budget=self.BOOSTED_THINKING_BUDGET if is_boosted else 0,
        )

        try:
            response = await self._call_backend(request)
        except BackendUnavailable as e:
            logger.error(f"Routing error on {route.id}: {e}")
            self._log_error(route, e)
            return self._fallback_result()

        text = response.text or self.EMPTY_RESPONSE_TEXT
        processing_time = (self._timer() - start_time) * 1000 + overhead

        result = InferenceResult(
            text=text,
            tool_calls=tuple(response.tool_calls or ()),
            metrics=InferenceMetrics(
                ttft=max(self.MIN_TTFT_MS, processing_time * self.TTFT_RATIO),
                total_latency=processing_time,
                cached=False,
                accelerated=is_boosted,
                provider=route.provider,
                cluster=self.ACCELERATED_CLUSTER if is_boosted else self.EDGE_CLUSTER,
                throughput=throughput,
            ),
            cost=self.estimate_cost(route, message, text),
            model_used=route.label,
        )

        self.cache.set(cache_key, result)
        self.connections.record_active(route.id)
        self._log_inference(route, result)

        return result

    async def _call_backend(self, request: GenerationRequest) -> GenerationResponse:
        """
        Call the backend once, under the configured timeout.

        Raises:
            BackendUnavailable: On any backend error or timeout
        """
        try:
            if self.backend_timeout_seconds is None:
                return await self.backend.generate(request)
            return await asyncio.wait_for(
                self.backend.generate(request), timeout=self.backend_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise BackendUnavailable(
                request.target_model, f"timed out after {self.backend_timeout_seconds}s"
            ) from e
        except Exception as e:
            raise BackendUnavailable(request.target_model, str(e) or type(e).__name__) from e

    @classmethod
    def estimate_cost(cls, route: Route, prompt: str, text: str) -> float:
        """
        Estimate request cost from character counts.

        Tokens are approximated as characters / 4, not real tokenization.
        """
        input_tokens = len(prompt) / cls.CHARS_PER_TOKEN
        output_tokens = len(text) / cls.CHARS_PER_TOKEN
        return ((input_tokens + output_tokens) / 1000) * route.cost_per_1k

    def _as_cache_hit(self, result: InferenceResult) -> InferenceResult:
        """Copy of a cached result with cache-hit latency figures."""
        return dataclasses.replace(
            result,
            metrics=dataclasses.replace(
                result.metrics,
                cached=True,
                total_latency=self.CACHE_HIT_LATENCY_MS,
                ttft=self.CACHE_HIT_TTFT_MS,
            ),
        )

    def _fallback_result(self) -> InferenceResult:
        return InferenceResult(
            text=self.FALLBACK_TEXT,
            metrics=InferenceMetrics(
                ttft=0,
                total_latency=0,
                cached=False,
                accelerated=False,
                provider=self.FALLBACK_PROVIDER,
                cluster=self.FALLBACK_CLUSTER,
                throughput=0,
            ),
            cost=0.0,
            model_used=self.FALLBACK_MODEL,
        )

    def _log_inference(self, route: Route, result: InferenceResult):
        """Log resolved request."""
        if not self.log_dir:
            return

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "route": route.id,
            "model_used": result.model_used,
            "cached": result.metrics.cached,
            "latency_ms": result.metrics.total_latency,
            "cost": result.cost,
            "tool_calls": [call.name for call in result.tool_calls],
            "status": "success",
        }

        self._append_log("inference.jsonl", log_entry)

    def _log_error(self, route: Route, error: BackendUnavailable):
        """Log fallback caused by backend error."""
        if not self.log_dir:
            return

        cause = error.__cause__
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "route": route.id,
            "model": error.model,
            "error": error.details,
            "error_type": type(cause).__name__ if cause else type(error).__name__,
            "status": "fallback",
        }

        self._append_log("errors.jsonl", log_entry)

    def _append_log(self, file_name: str, log_entry: dict):
        """
        Append one JSONL entry under <log_dir>/gateway/.

        Write failures are logged and dropped so resolve() keeps its result.
        """
        try:
            log_path = Path(self.log_dir) / "gateway" / file_name
            log_path.parent.mkdir(parents=True, exist_ok=True)

            with open(log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")
        except OSError as e:
            logger.warning(f"Failed to write inference log: {e}")
