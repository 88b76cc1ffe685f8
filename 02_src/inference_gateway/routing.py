"""
Routing matrix and route selection.

Maps a chat message and the boost flag to one of the fixed model routes.
"""
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .models import Complexity, Route, Tier


COMPLEXITY_LENGTH_THRESHOLD = 60
ANALYSIS_KEYWORDS = ("analyze",)

# Base cluster capacity (TFLOPS) reported when the caller gives no hint
BASE_THROUGHPUT = 120.0


class RouteKey(str, Enum):
    """Entries of the routing matrix, tagged with their tier."""

    ACCELERATED_REASONING = "accelerated.reasoning"
    ACCELERATED_CREATIVE = "accelerated.creative"
    EDGE_FAST = "edge.fast"
    EDGE_FALLBACK = "edge.fallback"

    @property
    def tier(self) -> Tier:
        return Tier(self.value.split(".", 1)[0])


ROUTING_MATRIX: Mapping[RouteKey, Route] = MappingProxyType({
    RouteKey.ACCELERATED_REASONING: Route(
        id="claude-3-5-sonnet",
        provider="Anthropic",
        label="Claude 3.5 Sonnet",
        cost_per_1k=0.015,
        backing_model="gemini-3-pro-preview",
        latency_base=850,
    ),
    RouteKey.ACCELERATED_CREATIVE: Route(
        id="gpt-4o",
        provider="OpenAI",
        label="GPT-4o",
        cost_per_1k=0.010,
        backing_model="gemini-3-pro-preview",
        latency_base=720,
    ),
    RouteKey.EDGE_FAST: Route(
        id="gemini-flash",
        provider="Google",
        label="Gemini 3 Flash",
        cost_per_1k=0.0001,
        backing_model="gemini-3-flash-preview",
        latency_base=120,
    ),
    # Not reachable through select_route(); kept as configuration.
    RouteKey.EDGE_FALLBACK: Route(
        id="gpt-4o-mini",
        provider="OpenAI",
        label="GPT-4o Mini",
        cost_per_1k=0.0001,
        backing_model="gemini-3-flash-preview",
        latency_base=140,
    ),
})


def classify_complexity(message: str) -> Complexity:
    """
    Classify a message as SIMPLE or COMPLEX.

    Long messages and messages asking for analysis count as COMPLEX.
    This is a coarse proxy for task difficulty, not a classifier.

    Args:
        message: Chat message (trimmed by the caller)

    Returns:
        Complexity
    """
    if len(message) > COMPLEXITY_LENGTH_THRESHOLD:
        return Complexity.COMPLEX

    lowered = message.lower()
    if any(keyword in lowered for keyword in ANALYSIS_KEYWORDS):
        return Complexity.COMPLEX

    return Complexity.SIMPLE


def select_route_key(complexity: Complexity, is_boosted: bool) -> RouteKey:
    """Pick the matrix entry for a complexity class and boost flag."""
    if not is_boosted:
        return RouteKey.EDGE_FAST

    if complexity is Complexity.COMPLEX:
        return RouteKey.ACCELERATED_REASONING
    return RouteKey.ACCELERATED_CREATIVE


def select_route(complexity: Complexity, is_boosted: bool) -> Route:
    """Pick the Route for a complexity class and boost flag."""
    return ROUTING_MATRIX[select_route_key(complexity, is_boosted)]


def build_cache_key(route: Route, message: str) -> str:
    """Cache key: route id plus the trimmed, lower-cased message."""
    return f"{route.id}:{message.strip().lower()}"
