"""
Completion request models and per-vendor request shaping.
"""

from typing import Optional, List, Dict, Any, Literal
from pydantic import BaseModel, Field


class Message(BaseModel):
    """Chat message."""
    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    """
    Vendor-neutral completion request.

    Each adapter picks the format its vendor expects.
    """
    model: str = Field(..., description="Model identifier")
    messages: List[Message] = Field(..., description="Conversation messages")

    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    stream: Optional[bool] = None

    @classmethod
    def from_prompt(
        cls,
        model: str,
        prompt: str,
        system_prompt: Optional[str] = None,
        **params: Any,
    ) -> "CompletionRequest":
        messages = []
        if system_prompt:
            messages.append(Message(role="system", content=system_prompt))
        messages.append(Message(role="user", content=prompt))
        return cls(model=model, messages=messages, **params)

    def _messages(self) -> List[Dict[str, str]]:
        return [m.model_dump() for m in self.messages]

    def to_openai_format(self) -> Dict[str, Any]:
        """Convert to the OpenAI chat completions format."""
        data = {
            "model": self.model,
            "messages": self._messages(),
        }

        for field in ("temperature", "top_p", "max_tokens", "stream"):
            value = getattr(self, field)
            if value is not None:
                data[field] = value

        return data

    def to_dashscope_format(self) -> Dict[str, Any]:
        """Convert to the DashScope text-generation format."""
        parameters = {}
        for field in ("temperature", "top_p", "max_tokens"):
            value = getattr(self, field)
            if value is not None:
                parameters[field] = value

        return {
            "model": self.model,
            "input": {"messages": self._messages()},
            "parameters": parameters,
        }

    def to_ernie_format(self) -> Dict[str, Any]:
        """Convert to the ERNIE chat format (model lives in the URL)."""
        data: Dict[str, Any] = {
            "messages": [m for m in self._messages() if m["role"] != "system"],
        }

        system = next((m.content for m in self.messages if m.role == "system"), None)
        if system:
            data["system"] = system

        for field in ("temperature", "top_p"):
            value = getattr(self, field)
            if value is not None:
                data[field] = value

        if self.max_tokens is not None:
            data["max_output_tokens"] = self.max_tokens

        return data
