"""
Data models for Inference Gateway.

Defines routes, backend request/response structures and inference results.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ModelProvider(str, Enum):
    """LangChain client families available to the generation backend."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"


class Tier(str, Enum):
    """Routing tiers."""

    ACCELERATED = "accelerated"
    EDGE = "edge"


class Complexity(str, Enum):
    """Coarse task difficulty of a chat message."""

    SIMPLE = "simple"
    COMPLEX = "complex"


@dataclass(frozen=True)
class Route:
    """
    Immutable route descriptor.

    provider and label describe the route as advertised to callers,
    backing_model is the model actually queried.
    """

    id: str
    provider: str
    label: str
    cost_per_1k: float
    backing_model: str
    latency_base: int  # ms


@dataclass
class ModelConfig:
    """Configuration for a backing model."""

    provider: ModelProvider
    api_key: str
    model_name: str
    endpoint: Optional[str] = None


@dataclass(frozen=True)
class ToolDeclaration:
    """Tool description for function calling."""

    name: str
    description: str
    parameters: Dict[str, Any]


@dataclass(frozen=True)
class ToolCall:
    """Tool invocation requested by the backend."""

    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GenerationRequest:
    """Request to the generation backend."""

    target_model: str
    prompt: str  # single user turn
    system_instruction: str
    tools: List[ToolDeclaration] = field(default_factory=list)
    temperature: float = 0.3
    thinking_budget: int = 0


@dataclass
class GenerationResponse:
    """Response from the generation backend."""

    text: str
    tool_calls: Optional[List[ToolCall]] = None
    usage: Optional[Dict[str, int]] = None  # tokens in/out
    latency_ms: int = 0


@dataclass(frozen=True)
class InferenceMetrics:
    """Performance metadata attached to every InferenceResult."""

    ttft: float
    total_latency: float
    cached: bool
    accelerated: bool
    provider: str
    cluster: str
    throughput: float


@dataclass(frozen=True)
class InferenceResult:
    """Value returned to callers of InferenceRouter.resolve()."""

    text: str
    metrics: InferenceMetrics
    cost: float
    model_used: str
    tool_calls: Tuple[ToolCall, ...] = ()
