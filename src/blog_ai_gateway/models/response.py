"""
Completion response models and per-vendor response parsing.
"""

import json
from typing import Optional, Dict, Any
from pydantic import BaseModel

from ..core.errors import MalformedResponseError

MAX_PAYLOAD_PREVIEW = 500


class Usage(BaseModel):
    """Token usage information."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


def payload_preview(data: Any, limit: int = MAX_PAYLOAD_PREVIEW) -> str:
    """Raw payload as text, truncated for logs and error messages."""
    if isinstance(data, str):
        text = data
    else:
        try:
            text = json.dumps(data, ensure_ascii=False)
        except (TypeError, ValueError):
            text = repr(data)
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class CompletionResult(BaseModel):
    """Text extracted from a vendor response."""
    text: str
    model: str = ""
    provider: Optional[str] = None
    usage: Optional[Usage] = None

    @staticmethod
    def _malformed(data: Any, gateway: Optional[str]) -> MalformedResponseError:
        return MalformedResponseError(
            f"Unexpected response format: {payload_preview(data)}",
            gateway=gateway,
            payload=payload_preview(data),
        )

    @classmethod
    def from_openai(cls, data: Dict[str, Any], gateway: str = None) -> "CompletionResult":
        """Create from an OpenAI-compatible chat completion."""
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise cls._malformed(data, gateway)
        if not isinstance(content, str):
            raise cls._malformed(data, gateway)

        usage_data = data.get("usage")
        return cls(
            text=content.strip(),
            model=data.get("model", ""),
            provider=gateway,
            usage=Usage(**usage_data) if isinstance(usage_data, dict) else None,
        )

    @classmethod
    def from_dashscope(cls, data: Dict[str, Any], gateway: str = None) -> "CompletionResult":
        """Create from a DashScope text-generation response."""
        try:
            content = data["output"]["text"]
        except (KeyError, TypeError):
            raise cls._malformed(data, gateway)
        if not isinstance(content, str) or not content:
            raise cls._malformed(data, gateway)

        usage_data = data.get("usage") or {}
        usage = Usage(
            prompt_tokens=usage_data.get("input_tokens", 0),
            completion_tokens=usage_data.get("output_tokens", 0),
            total_tokens=usage_data.get("total_tokens", 0)
            or usage_data.get("input_tokens", 0) + usage_data.get("output_tokens", 0),
        )
        return cls(text=content.strip(), provider=gateway, usage=usage)

    @classmethod
    def from_ernie(cls, data: Dict[str, Any], gateway: str = None) -> "CompletionResult":
        """Create from an ERNIE chat response."""
        content = data.get("result") if isinstance(data, dict) else None
        if not isinstance(content, str) or not content:
            raise cls._malformed(data, gateway)

        usage_data = data.get("usage")
        return cls(
            text=content,
            provider=gateway,
            usage=Usage(**usage_data) if isinstance(usage_data, dict) else None,
        )
