"""
Generation backend for Inference Gateway.

Sends a single-turn prompt with tool declarations to a LangChain chat model.
No retries: every error propagates to the caller.
"""
import asyncio
import copy
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import (
    GenerationRequest,
    GenerationResponse,
    ModelConfig,
    ModelProvider,
    ToolCall,
    ToolDeclaration,
)


logger = logging.getLogger(__name__)


class GenerationBackend(ABC):
    """
    Text generation capability consumed by InferenceRouter.

    Any exception raised by generate() is treated as a backend failure.
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """
        Generate a response for a single user turn.

        Args:
            request: GenerationRequest

        Returns:
            GenerationResponse
        """
        pass


class LangChainBackend(GenerationBackend):
    """
    Generation backend on top of LangChain chat models.

    Features:
    - One client per (model, temperature, thinking budget), created lazily
    - Tool declarations bound per request
    - JSONL logging for debugging
    """

    # Room for the answer on top of the thinking budget (Anthropic counts both)
    ANTHROPIC_ANSWER_TOKENS: int = 4096

    SUPPORTED_PROVIDERS = (
        ModelProvider.ANTHROPIC,
        ModelProvider.OPENAI,
        ModelProvider.GOOGLE,
    )

    def __init__(
        self,
        configs: Dict[str, ModelConfig],
        log_dir: Optional[str] = None,
    ):
        """
        Initialize LangChainBackend.

        Args:
            configs: Dict {backing_model: ModelConfig}
            log_dir: Directory for logs (optional)

        Raises:
            ValueError: If a provider is not supported
        """
        for model_id, config in configs.items():
            if config.provider not in self.SUPPORTED_PROVIDERS:
                raise ValueError(f"Unsupported provider for {model_id}: {config.provider}")

        self.configs = configs
        self.log_dir = log_dir
        self._clients: Dict[Tuple[str, float, int], Any] = {}

    def _create_client(
        self, config: ModelConfig, temperature: float, thinking_budget: int
    ) -> Any:
        """
        Create LangChain client for the model.

        Args:
            config: ModelConfig
            temperature: Sampling temperature
            thinking_budget: Extended thinking tokens (0 disables)

        Returns:
            LangChain chat model
        """
        provider = config.provider

        if provider == ModelProvider.GOOGLE:
            from langchain_google_genai import ChatGoogleGenerativeAI

            return ChatGoogleGenerativeAI(
                model=config.model_name,
                google_api_key=config.api_key,
                temperature=temperature,
                thinking_budget=thinking_budget,
            )
        elif provider == ModelProvider.ANTHROPIC:
            from langchain_anthropic import ChatAnthropic

            if thinking_budget > 0:
                # Extended thinking only runs at temperature 1
                return ChatAnthropic(
                    model=config.model_name,
                    api_key=config.api_key,
                    temperature=1.0,
                    max_tokens=thinking_budget + self.ANTHROPIC_ANSWER_TOKENS,
                    thinking={"type": "enabled", "budget_tokens": thinking_budget},
                )
            return ChatAnthropic(
                model=config.model_name,
                api_key=config.api_key,
                temperature=temperature,
            )
        elif provider == ModelProvider.OPENAI:
            from langchain_openai import ChatOpenAI

            return ChatOpenAI(
                model=config.model_name,
                api_key=config.api_key,
                base_url=config.endpoint,
                temperature=temperature,
            )
        else:
            raise ValueError(f"Unsupported provider: {provider}")

    def _get_client(self, request: GenerationRequest) -> Any:
        config = self.configs.get(request.target_model)
        if not config:
            raise ValueError(f"Unknown model: {request.target_model}")

        key = (request.target_model, request.temperature, request.thinking_budget)
        client = self._clients.get(key)
        if client is None:
            client = self._create_client(
                config, request.temperature, request.thinking_budget
            )
            self._clients[key] = client
        return client

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """
        Send request to the backing model.

        Args:
            request: GenerationRequest

        Returns:
            GenerationResponse

        Raises:
            ValueError: If model not found
            Exception: Any provider or network error
        """
        client = self._get_client(request)
        if request.tools:
            client = client.bind_tools(self._to_langchain_tools(request.tools))

        lc_messages = [
            ("system", request.system_instruction),
            ("user", request.prompt),
        ]

        start_time = asyncio.get_event_loop().time()
        try:
            lc_response = await client.ainvoke(lc_messages)
        except Exception as e:
            self._log_error(request, e)
            raise

        response = GenerationResponse(
            text=self._extract_text(lc_response),
            tool_calls=self._extract_tool_calls(lc_response),
            usage=getattr(lc_response, "usage_metadata", None),
            latency_ms=int((asyncio.get_event_loop().time() - start_time) * 1000),
        )

        self._log_success(request, response)
        return response

    def _to_langchain_tools(self, tools: Sequence[ToolDeclaration]) -> List[Dict[str, Any]]:
        """Convert tool declarations to OpenAI-style function schemas (deep copies)."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": copy.deepcopy(tool.parameters),
                },
            }
            for tool in tools
        ]

    def _extract_text(self, lc_response) -> str:
        """
        Extract answer text from langchain response.

        Content is either a string or a list of blocks (thinking models).
        """
        content = getattr(lc_response, "content", "")
        if isinstance(content, str):
            return content

        parts = []
        for block in content or []:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)

    def _extract_tool_calls(self, lc_response) -> Optional[List[ToolCall]]:
        """
        Extract tool calls from langchain response.

        Returns:
            List of ToolCall or None
        """
        tool_calls = getattr(lc_response, "tool_calls", None)
        if not tool_calls:
            return None
        return [
            ToolCall(name=call["name"], args=dict(call.get("args") or {}))
            for call in tool_calls
        ]

    def _log_success(self, request: GenerationRequest, response: GenerationResponse):
        """Log successful request."""
        if not self.log_dir:
            return

        log_path = Path(self.log_dir) / "gateway" / "backend_requests.jsonl"
        log_path.parent.mkdir(parents=True, exist_ok=True)

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "model": request.target_model,
            "temperature": request.temperature,
            "thinking_budget": request.thinking_budget,
            "tool_calls": len(response.tool_calls or []),
            "latency_ms": response.latency_ms,
            "usage": dict(response.usage) if response.usage else None,
            "status": "success",
        }

        with open(log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")

    def _log_error(self, request: GenerationRequest, error: Exception):
        """Log backend error."""
        if not self.log_dir:
            return

        log_path = Path(self.log_dir) / "gateway" / "backend_errors.jsonl"
        log_path.parent.mkdir(parents=True, exist_ok=True)

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "model": request.target_model,
            "error": str(error),
            "error_type": type(error).__name__,
            "status": "error",
        }

        with open(log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")
