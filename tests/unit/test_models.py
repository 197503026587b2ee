"""
Unit tests for request shaping, response parsing, errors and prompts.
"""
import pytest

from blog_ai_gateway.core.catalog import get_model_info
from blog_ai_gateway.core.errors import (
    AuthenticationError,
    GatewayError,
    MalformedResponseError,
    TransportError,
)
from blog_ai_gateway.core.interface import render_template
from blog_ai_gateway.models.request import CompletionRequest
from blog_ai_gateway.models.response import CompletionResult, payload_preview
from blog_ai_gateway.prompts import build_seo_prompt, history_prompt, parse_seo_result


class TestCompletionRequest:
    """Test per-vendor request shapes."""

    def test_openai_format(self):
        request = CompletionRequest.from_prompt(
            "gpt-4", "Hello", system_prompt="Be brief", temperature=0.3, max_tokens=500, stream=False
        )
        data = request.to_openai_format()
        assert data["model"] == "gpt-4"
        assert data["messages"] == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Hello"},
        ]
        assert data["temperature"] == 0.3
        assert data["max_tokens"] == 500
        assert data["stream"] is False
        assert "top_p" not in data

    def test_dashscope_format(self):
        request = CompletionRequest.from_prompt("qwen-plus", "Hello", top_p=0.8, max_tokens=800)
        data = request.to_dashscope_format()
        assert data["model"] == "qwen-plus"
        assert data["input"]["messages"] == [{"role": "user", "content": "Hello"}]
        assert data["parameters"] == {"top_p": 0.8, "max_tokens": 800}

    def test_ernie_format_moves_system_prompt(self):
        request = CompletionRequest.from_prompt("ERNIE-Bot-4", "Hello", system_prompt="Be brief", top_p=0.8)
        data = request.to_ernie_format()
        assert data["messages"] == [{"role": "user", "content": "Hello"}]
        assert data["system"] == "Be brief"
        assert data["top_p"] == 0.8
        assert "model" not in data

    def test_ernie_format_max_output_tokens(self):
        request = CompletionRequest.from_prompt("ERNIE-Bot-4", "Hello", max_tokens=800)
        data = request.to_ernie_format()
        assert data["max_output_tokens"] == 800
        assert "max_tokens" not in data


class TestCompletionResult:
    """Test response parsing."""

    def test_from_openai(self):
        result = CompletionResult.from_openai(
            {"model": "gpt-4", "choices": [{"message": {"content": "  Hi  "}}], "usage": {"total_tokens": 3}},
            gateway="openai",
        )
        assert result.text == "Hi"
        assert result.provider == "openai"
        assert result.usage.total_tokens == 3

    @pytest.mark.parametrize("payload", [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        {"error": {"message": "bad"}},
    ])
    def test_from_openai_malformed(self, payload):
        with pytest.raises(MalformedResponseError) as exc_info:
            CompletionResult.from_openai(payload, gateway="openai")
        assert exc_info.value.gateway == "openai"

    def test_from_dashscope(self):
        result = CompletionResult.from_dashscope(
            {"output": {"text": "Qwen"}, "usage": {"input_tokens": 4, "output_tokens": 6}},
            gateway="ali",
        )
        assert result.text == "Qwen"
        assert result.usage.total_tokens == 10

    def test_from_dashscope_malformed(self):
        with pytest.raises(MalformedResponseError):
            CompletionResult.from_dashscope({"output": {}}, gateway="ali")

    def test_from_ernie(self):
        result = CompletionResult.from_ernie({"result": "ERNIE"}, gateway="baidu")
        assert result.text == "ERNIE"

    def test_from_ernie_malformed(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            CompletionResult.from_ernie({"error_msg": "nope"}, gateway="baidu")
        assert "nope" in exc_info.value.payload

    def test_payload_preview_truncates(self):
        preview = payload_preview("x" * 600)
        assert len(preview) == 503
        assert preview.endswith("...")


class TestErrors:
    """Test the error hierarchy."""

    def test_codes(self):
        assert TransportError("x").code == "ECONNABORTED"
        assert TransportError("x", code="ENOTFOUND").code == "ENOTFOUND"
        assert AuthenticationError("x", status_code=401).code == "AUTH_ERROR"

    def test_with_prefix_keeps_type(self):
        error = AuthenticationError("denied", gateway="openai", status_code=401)
        prefixed = error.with_prefix("Summary generation failed")

        assert isinstance(prefixed, AuthenticationError)
        assert isinstance(prefixed, GatewayError)
        assert prefixed.message == "Summary generation failed: denied"
        assert str(prefixed) == "Summary generation failed: denied"
        assert prefixed.status_code == 401
        assert error.message == "denied"


class TestPrompts:
    """Test prompt helpers."""

    def test_render_template_first_placeholder(self):
        assert render_template("A {content} B {content}", "x") == "A x B {content}"

    def test_history_prompt_truncates(self):
        prompt = history_prompt("Summarize: {content}", "y" * 150)
        assert prompt == "Summarize: " + "y" * 100 + "..."

    def test_seo_prompt_truncates_content(self):
        prompt = build_seo_prompt("Title", "z" * 1200)
        assert "Article title: Title" in prompt
        assert "z" * 1000 + "..." in prompt
        assert "z" * 1001 not in prompt

    def test_parse_seo_result(self):
        seo = parse_seo_result(
            '```json\n{"metaDescription": "Meta", "keywords": "a,b,c", "shareDescription": "Share"}\n```'
        )
        assert seo.meta_description == "Meta"
        assert seo.keywords == "a,b,c"
        assert seo.share_description == "Share"

    def test_parse_seo_result_invalid(self):
        with pytest.raises(MalformedResponseError):
            parse_seo_result("Here are some keywords: a, b, c")

    def test_parse_seo_result_missing_field(self):
        with pytest.raises(MalformedResponseError):
            parse_seo_result('{"keywords": "a"}')


class TestCatalog:
    """Test static model information."""

    def test_known_model(self):
        info = get_model_info("deepseek", "deepseek-chat")
        assert info.max_tokens == 8000
        assert info.region == "China"
        assert "chinese optimized" in info.capabilities

    def test_unknown_model(self):
        info = get_model_info("openai", "gpt-9")
        assert info.max_tokens == 4096
        assert info.region == "Global"
