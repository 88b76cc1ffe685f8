"""
Inference Gateway module.

Routes chat messages to model routes with result caching
and connection warmth accounting.
"""
from .backend import GenerationBackend, LangChainBackend
from .config import (
    GatewayConfig,
    create_router,
    get_gateway_config,
    get_model_configs,
    setup_logging,
)
from .connection_optimizer import ConnectionOptimizer
from .errors import BackendUnavailable, InferenceGatewayError, InvalidInput
from .inference_cache import CacheEntry, CacheStats, InferenceCache
from .inference_router import InferenceRouter
from .models import (
    Complexity,
    GenerationRequest,
    GenerationResponse,
    InferenceMetrics,
    InferenceResult,
    ModelConfig,
    ModelProvider,
    Route,
    Tier,
    ToolCall,
    ToolDeclaration,
)
from .routing import ROUTING_MATRIX, RouteKey, classify_complexity, select_route
from .tools import TOOL_MANIFEST, build_system_instruction

__all__ = [
    "InferenceRouter",
    "InferenceCache",
    "CacheEntry",
    "CacheStats",
    "ConnectionOptimizer",
    "GenerationBackend",
    "LangChainBackend",
    "GenerationRequest",
    "GenerationResponse",
    "InferenceMetrics",
    "InferenceResult",
    "ModelConfig",
    "ModelProvider",
    "Route",
    "RouteKey",
    "Tier",
    "Complexity",
    "ToolCall",
    "ToolDeclaration",
    "ROUTING_MATRIX",
    "TOOL_MANIFEST",
    "classify_complexity",
    "select_route",
    "build_system_instruction",
    "InferenceGatewayError",
    "InvalidInput",
    "BackendUnavailable",
    "GatewayConfig",
    "get_gateway_config",
    "get_model_configs",
    "create_router",
    "setup_logging",
]
