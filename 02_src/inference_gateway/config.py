"""
Configuration for Inference Gateway.

Loads environment variables for cache, timeout and provider credentials.
Provides optional logging setup for standalone usage.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from .backend import GenerationBackend, LangChainBackend
from .connection_optimizer import ConnectionOptimizer
from .inference_cache import InferenceCache
from .inference_router import InferenceRouter
from .models import ModelConfig, ModelProvider
from .routing import BASE_THROUGHPUT, ROUTING_MATRIX

load_dotenv()


# Backing model prefix -> (provider, env var holding the API key)
PROVIDER_BY_PREFIX = {
    "gemini": (ModelProvider.GOOGLE, "GOOGLE_API_KEY"),
    "claude": (ModelProvider.ANTHROPIC, "ANTHROPIC_API_KEY"),
    "gpt": (ModelProvider.OPENAI, "OPENAI_API_KEY"),
}


@dataclass
class GatewayConfig:
    """Runtime settings for InferenceRouter."""

    cache_ttl_seconds: float = InferenceCache.DEFAULT_TTL_SECONDS
    cache_max_size: int = InferenceCache.DEFAULT_MAX_SIZE
    backend_timeout_seconds: float = 8.0
    default_throughput: float = BASE_THROUGHPUT
    log_dir: Optional[str] = None


def get_gateway_config() -> GatewayConfig:
    """
    Get gateway configuration from environment variables.

    Variables:
        - INFERENCE_CACHE_TTL_SECONDS (default: 1200)
        - INFERENCE_CACHE_MAX_SIZE (default: 50)
        - INFERENCE_BACKEND_TIMEOUT_SECONDS (default: 8.0)
        - INFERENCE_DEFAULT_THROUGHPUT (default: 120.0)
        - INFERENCE_LOG_DIR (default: unset, no JSONL logs)

    Examples:
        >>> config = get_gateway_config()
        >>> config.cache_max_size
        50
    """
    return GatewayConfig(
        cache_ttl_seconds=float(
            os.getenv("INFERENCE_CACHE_TTL_SECONDS", InferenceCache.DEFAULT_TTL_SECONDS)
        ),
        cache_max_size=int(
            os.getenv("INFERENCE_CACHE_MAX_SIZE", InferenceCache.DEFAULT_MAX_SIZE)
        ),
        backend_timeout_seconds=float(os.getenv("INFERENCE_BACKEND_TIMEOUT_SECONDS", 8.0)),
        default_throughput=float(os.getenv("INFERENCE_DEFAULT_THROUGHPUT", BASE_THROUGHPUT)),
        log_dir=os.getenv("INFERENCE_LOG_DIR") or None,
    )


def get_model_configs() -> Dict[str, ModelConfig]:
    """
    Build ModelConfig for every backing model in the routing matrix.

    Provider is derived from the model name prefix.

    Returns:
        Dict {backing_model: ModelConfig}

    Raises:
        ValueError: If a backing model has no known provider
    """
    configs: Dict[str, ModelConfig] = {}
    for route in ROUTING_MATRIX.values():
        model_name = route.backing_model
        if model_name in configs:
            continue

        prefix = model_name.split("-", 1)[0]
        if prefix not in PROVIDER_BY_PREFIX:
            raise ValueError(f"No provider known for model: {model_name}")

        provider, key_var = PROVIDER_BY_PREFIX[prefix]
        configs[model_name] = ModelConfig(
            provider=provider,
            api_key=os.getenv(key_var, ""),
            model_name=model_name,
        )

    return configs


def create_router(
    config: Optional[GatewayConfig] = None,
    backend: Optional[GenerationBackend] = None,
) -> InferenceRouter:
    """
    Wire cache, connection optimizer and backend into an InferenceRouter.

    Args:
        config: GatewayConfig (read from environment if omitted)
        backend: Generation backend (LangChainBackend if omitted)

    Returns:
        InferenceRouter
    """
    config = config or get_gateway_config()
    if backend is None:
        backend = LangChainBackend(get_model_configs(), log_dir=config.log_dir)

    return InferenceRouter(
        backend=backend,
        cache=InferenceCache(
            ttl_seconds=config.cache_ttl_seconds,
            max_size=config.cache_max_size,
        ),
        connections=ConnectionOptimizer(),
        backend_timeout_seconds=config.backend_timeout_seconds,
        default_throughput=config.default_throughput,
        log_dir=config.log_dir,
    )


def setup_logging(log_file: Optional[str] = None, level: int = logging.INFO) -> None:
    """
    Setup file logging for the gateway (optional, for standalone usage).

    Configures a FileHandler for the inference_gateway logger.
    For production use, prefer configuring logging at application level.

    Args:
        log_file: Path to log file (e.g., '04_logs/gateway/inference.log').
                  If None, only the level is set.
        level: Logging level (default: INFO)
    """
    logger = logging.getLogger("inference_gateway")

    # Avoid adding duplicate handlers
    if logger.handlers:
        return

    logger.setLevel(level)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(level)
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = True
