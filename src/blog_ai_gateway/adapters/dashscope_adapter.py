"""
Alibaba DashScope (Qwen) adapter.

OpenAI-style bearer auth with DashScope's nested request and response
shapes.
"""

from typing import Dict

from ..core.config import ProviderType
from ..core.interface import AIProvider, DEFAULT_SYSTEM_PROMPT
from ..models.request import CompletionRequest
from ..models.response import CompletionResult


class DashScopeProvider(AIProvider):
    """DashScope text-generation adapter."""

    provider_type = ProviderType.ALI
    default_model = "qwen-plus"
    default_base_url = "https://dashscope.aliyuncs.com/api/v1"

    GENERATION_PATH = "/services/aigc/text-generation/generation"
    TEMPERATURE = 0.7
    TOP_P = 0.8
    MAX_TOKENS = 800

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def _request_completion(self, prompt: str) -> CompletionResult:
        request = CompletionRequest.from_prompt(
            self.model,
            prompt,
            system_prompt=DEFAULT_SYSTEM_PROMPT,
            temperature=self.TEMPERATURE,
            top_p=self.TOP_P,
            max_tokens=self.max_tokens,
        )

        data = await self._post(
            f"{self._base_url}{self.GENERATION_PATH}",
            json=request.to_dashscope_format(),
        )
        result = CompletionResult.from_dashscope(data, gateway=self.name)
        result.model = self.model
        return result
