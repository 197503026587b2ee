"""
OpenAI chat completions adapter.
"""

import logging
from typing import Dict

from ..core.config import ProviderType
from ..core.interface import AIProvider, DEFAULT_SYSTEM_PROMPT
from ..models.request import CompletionRequest
from ..models.response import CompletionResult

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    """
    OpenAI API adapter.

    Bearer-token auth, fixed system prompt, first choice text.
    """

    provider_type = ProviderType.OPENAI
    default_model = "gpt-3.5-turbo"
    default_base_url = "https://api.openai.com/v1"

    TEMPERATURE = 0.7
    MAX_TOKENS = 1000

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
            max_tokens=self.max_tokens,
        )

        data = await self._post(
            f"{self._base_url}/chat/completions",
            json=request.to_openai_format(),
        )
        return CompletionResult.from_openai(data, gateway=self.name)
