"""
Unit tests for LangChainBackend.

All tests use mocks to avoid real API calls.
"""
import json
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Mock langchain modules before creating clients
sys.modules["langchain_anthropic"] = MagicMock()
sys.modules["langchain_openai"] = MagicMock()
sys.modules["langchain_google_genai"] = MagicMock()

from inference_gateway.backend import LangChainBackend
from inference_gateway.models import GenerationRequest, ModelConfig, ModelProvider, ToolCall
from inference_gateway.tools import TOOL_MANIFEST


@pytest.fixture
def mock_configs():
    """Create mock model configs."""
    return {
        "gemini-3-flash-preview": ModelConfig(
            provider=ModelProvider.GOOGLE,
            api_key="test-key",
            model_name="gemini-3-flash-preview",
        ),
        "claude-sonnet": ModelConfig(
            provider=ModelProvider.ANTHROPIC,
            api_key="test-key",
            model_name="claude-3-5-sonnet-20241022",
        ),
        "gpt-4o": ModelConfig(
            provider=ModelProvider.OPENAI,
            api_key="test-key",
            model_name="gpt-4o",
        ),
    }


@pytest.fixture
def sample_request():
    return GenerationRequest(
        target_model="gemini-3-flash-preview",
        prompt="hi",
        system_instruction="You are a test.",
        tools=list(TOOL_MANIFEST),
        temperature=0.3,
        thinking_budget=0,
    )


def make_client(content="Test response", tool_calls=None, error=None):
    """Client mock whose bound version returns the given content."""
    lc_response = MagicMock()
    lc_response.content = content
    lc_response.tool_calls = tool_calls or []
    lc_response.usage_metadata = {"input_tokens": 10, "output_tokens": 20}

    bound = MagicMock()
    if error:
        bound.ainvoke = AsyncMock(side_effect=error)
    else:
        bound.ainvoke = AsyncMock(return_value=lc_response)

    client = MagicMock()
    client.bind_tools.return_value = bound
    client.ainvoke = bound.ainvoke
    return client


class TestLangChainBackendInit:
    """Tests for client creation."""

    def test_google_client(self, mock_configs):
        backend = LangChainBackend(mock_configs)
        google = sys.modules["langchain_google_genai"].ChatGoogleGenerativeAI
        google.reset_mock()

        backend._create_client(mock_configs["gemini-3-flash-preview"], 0.7, 16384)

        kwargs = google.call_args.kwargs
        assert kwargs["model"] == "gemini-3-flash-preview"
        assert kwargs["temperature"] == 0.7
        assert kwargs["thinking_budget"] == 16384

    def test_anthropic_thinking_forces_temperature(self, mock_configs):
        backend = LangChainBackend(mock_configs)
        anthropic = sys.modules["langchain_anthropic"].ChatAnthropic
        anthropic.reset_mock()

        backend._create_client(mock_configs["claude-sonnet"], 0.7, 2048)

        kwargs = anthropic.call_args.kwargs
        assert kwargs["temperature"] == 1.0
        assert kwargs["thinking"] == {"type": "enabled", "budget_tokens": 2048}
        assert kwargs["max_tokens"] > 2048

    def test_anthropic_without_thinking(self, mock_configs):
        backend = LangChainBackend(mock_configs)
        anthropic = sys.modules["langchain_anthropic"].ChatAnthropic
        anthropic.reset_mock()

        backend._create_client(mock_configs["claude-sonnet"], 0.3, 0)

        kwargs = anthropic.call_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert "thinking" not in kwargs

    def test_openai_client(self, mock_configs):
        backend = LangChainBackend(mock_configs)
        openai = sys.modules["langchain_openai"].ChatOpenAI
        openai.reset_mock()

        backend._create_client(mock_configs["gpt-4o"], 0.3, 0)

        assert openai.call_args.kwargs["model"] == "gpt-4o"

    def test_unsupported_provider_raises_error(self):
        config = ModelConfig(provider="local-llama", api_key="", model_name="llama2")

        with pytest.raises(ValueError, match="Unsupported provider"):
            LangChainBackend({"llama": config})


class TestLangChainBackendGenerate:
    """Tests for generate()."""

    @pytest.mark.asyncio
    async def test_generate_success(self, mock_configs, sample_request):
        backend = LangChainBackend(mock_configs)
        client = make_client(content="Hello!")

        with patch.object(backend, "_create_client", return_value=client):
            response = await backend.generate(sample_request)

        assert response.text == "Hello!"
        assert response.tool_calls is None
        assert response.usage == {"input_tokens": 10, "output_tokens": 20}
        assert response.latency_ms >= 0

        messages = client.bind_tools.return_value.ainvoke.call_args.args[0]
        assert messages == [("system", "You are a test."), ("user", "hi")]

    @pytest.mark.asyncio
    async def test_tools_bound_in_openai_format(self, mock_configs, sample_request):
        backend = LangChainBackend(mock_configs)
        client = make_client()

        with patch.object(backend, "_create_client", return_value=client):
            await backend.generate(sample_request)

        tools = client.bind_tools.call_args.args[0]
        assert len(tools) == 4
        assert tools[0]["type"] == "function"
        assert tools[0]["function"]["name"] == "navigateToSection"
        assert tools[0]["function"]["parameters"]["required"] == ["sectionId"]

    @pytest.mark.asyncio
    async def test_bound_schemas_do_not_alias_manifest(self, mock_configs, sample_request):
        backend = LangChainBackend(mock_configs)
        client = make_client()

        with patch.object(backend, "_create_client", return_value=client):
            await backend.generate(sample_request)

        tools = client.bind_tools.call_args.args[0]
        tools[0]["function"]["parameters"]["required"].append("extra")

        assert isinstance(TOOL_MANIFEST, tuple)
        assert TOOL_MANIFEST[0].parameters["required"] == ["sectionId"]

    @pytest.mark.asyncio
    async def test_tool_calls_extracted(self, mock_configs, sample_request):
        backend = LangChainBackend(mock_configs)
        client = make_client(
            content="",
            tool_calls=[{"name": "toggleGPU", "args": {"active": True}, "id": "call_1"}],
        )

        with patch.object(backend, "_create_client", return_value=client):
            response = await backend.generate(sample_request)

        assert response.tool_calls == [ToolCall(name="toggleGPU", args={"active": True})]

    @pytest.mark.asyncio
    async def test_block_content_joined(self, mock_configs, sample_request):
        backend = LangChainBackend(mock_configs)
        client = make_client(
            content=[
                {"type": "thinking", "thinking": "hmm"},
                {"type": "text", "text": "Part one. "},
                {"type": "text", "text": "Part two."},
            ]
        )

        with patch.object(backend, "_create_client", return_value=client):
            response = await backend.generate(sample_request)

        assert response.text == "Part one. Part two."

    @pytest.mark.asyncio
    async def test_clients_reused_per_settings(self, mock_configs, sample_request):
        backend = LangChainBackend(mock_configs)

        with patch.object(backend, "_create_client", return_value=make_client()) as create:
            await backend.generate(sample_request)
            await backend.generate(sample_request)
            sample_request.temperature = 0.7
            await backend.generate(sample_request)

        assert create.call_count == 2

    @pytest.mark.asyncio
    async def test_unknown_model_raises(self, mock_configs, sample_request):
        backend = LangChainBackend(mock_configs)
        sample_request.target_model = "missing"

        with pytest.raises(ValueError, match="Unknown model"):
            await backend.generate(sample_request)

    @pytest.mark.asyncio
    async def test_error_propagates_and_is_logged(self, mock_configs, sample_request, tmp_path):
        backend = LangChainBackend(mock_configs, log_dir=str(tmp_path))
        client = make_client(error=ConnectionError("reset"))

        with patch.object(backend, "_create_client", return_value=client):
            with pytest.raises(ConnectionError):
                await backend.generate(sample_request)

        log_path = tmp_path / "gateway" / "backend_errors.jsonl"
        entry = json.loads(log_path.read_text().splitlines()[0])
        assert entry["error_type"] == "ConnectionError"
        assert entry["model"] == "gemini-3-flash-preview"

    @pytest.mark.asyncio
    async def test_success_is_logged(self, mock_configs, sample_request, tmp_path):
        backend = LangChainBackend(mock_configs, log_dir=str(tmp_path))

        with patch.object(backend, "_create_client", return_value=make_client()):
            await backend.generate(sample_request)

        log_path = tmp_path / "gateway" / "backend_requests.jsonl"
        entry = json.loads(log_path.read_text().splitlines()[0])
        assert entry["status"] == "success"
        assert entry["temperature"] == 0.3
        assert entry["usage"] == {"input_tokens": 10, "output_tokens": 20}
