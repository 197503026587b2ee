"""
DeepSeek chat completions adapter.

Favors latency: low temperature, a reduced token budget and a single
non-streamed JSON response.
"""

import logging
from typing import Dict

import httpx

from ..core.config import ProviderType
from ..core.errors import AuthenticationError, ConfigurationError, RateLimitError
from ..core.interface import AIProvider
from ..models.request import CompletionRequest
from ..models.response import CompletionResult, payload_preview

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "sk-"

SYSTEM_PROMPT = (
    "You are a professional writing assistant. Output strictly in Markdown and "
    "keep the original structure (headings, lists, bold, italics). Do not add "
    "explanations; return only the processed content."
)


class DeepSeekProvider(AIProvider):
    """DeepSeek API adapter."""

    provider_type = ProviderType.DEEPSEEK
    default_model = "deepseek-chat"
    default_base_url = "https://api.deepseek.com/v1"

    TEMPERATURE = 0.3
    MAX_TOKENS = 500

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
            "User-Agent": "BlogAIGateway/1.0",
        }

    def _validate_credentials(self) -> None:
        if not self._api_key or not self._api_key.startswith(API_KEY_PREFIX):
            raise ConfigurationError(
                f"DeepSeek API key format is invalid, it should start with {API_KEY_PREFIX}",
                gateway=self.name,
            )

    def _check_response_errors(self, response: httpx.Response) -> None:
        if response.is_success:
            return

        status = response.status_code
        payload = payload_preview(self._error_payload(response))

        if status == 401:
            logger.error(f"DeepSeek API error status: {status}, body: {payload}")
            raise AuthenticationError(
                "DeepSeek API authentication failed: the API key is invalid or expired. "
                f"Check the key or create a new one in the DeepSeek console. Raw error: {payload}",
                gateway=self.name,
                status_code=status,
                payload=payload,
            )
        if status == 403:
            logger.error(f"DeepSeek API error status: {status}, body: {payload}")
            raise AuthenticationError(
                "DeepSeek API authorization failed: the account may not access the requested "
                f"resource or model. Check the account permissions. Raw error: {payload}",
                gateway=self.name,
                status_code=status,
                payload=payload,
            )
        if status == 429:
            logger.error(f"DeepSeek API error status: {status}, body: {payload}")
            raise RateLimitError(
                "DeepSeek API rate limit exceeded: the account is over its request limit. "
                f"Back off and retry later or upgrade the plan. Raw error: {payload}",
                gateway=self.name,
                retry_after=self._retry_after(response),
                payload=payload,
            )

        super()._check_response_errors(response)

    async def _request_completion(self, prompt: str) -> CompletionResult:
        request = CompletionRequest.from_prompt(
            self.model,
            prompt,
            system_prompt=SYSTEM_PROMPT,
            temperature=self.TEMPERATURE,
            max_tokens=self.max_tokens,
            stream=False,
        )

        data = await self._post(
            f"{self._base_url}/chat/completions",
            json=request.to_openai_format(),
        )
        return CompletionResult.from_openai(data, gateway=self.name)
