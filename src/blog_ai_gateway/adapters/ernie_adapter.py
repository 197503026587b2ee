"""
Baidu ERNIE adapter.

ERNIE requires an OAuth client-credentials exchange before any completion
call. The access token is cached per adapter instance and sent as a query
parameter.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import httpx

from ..core.cache import ResponseCache
from ..core.config import ProviderConfig, ProviderType
from ..core.errors import AuthenticationError, ProviderHTTPError, RateLimitError
from ..core.interface import AIProvider
from ..core.monitor import PerformanceMonitor
from ..core.policy import GatewayPolicy
from ..models.request import CompletionRequest
from ..models.response import CompletionResult, payload_preview

logger = logging.getLogger(__name__)

# Refresh the token when less than this many seconds of validity remain.
TOKEN_REFRESH_MARGIN = 600.0

AUTH_ERROR_CODES = {110, 111}
RATE_LIMIT_ERROR_CODES = {4, 17, 18}


@dataclass
class AccessToken:
    token: str
    expires_at: float

    def is_valid(self, now: float, margin: float = TOKEN_REFRESH_MARGIN) -> bool:
        return self.expires_at > now + margin


class ErnieProvider(AIProvider):
    """
    Baidu ERNIE (Wenxin Workshop) adapter.

    Concurrent callers that both see an expiring token may both refresh
    it; the last exchange wins.
    """

    provider_type = ProviderType.BAIDU
    default_model = "ERNIE-Bot-4"
    default_base_url = "https://aip.baidubce.com"

    TOKEN_PATH = "/oauth/2.0/token"
    CHAT_PATH = "/rpc/2.0/ai_custom/v1/wenxinworkshop/chat"
    TEMPERATURE = 0.7
    TOP_P = 0.8

    def __init__(
        self,
        config: ProviderConfig,
        policy: Optional[GatewayPolicy] = None,
        cache: Optional[ResponseCache] = None,
        monitor: Optional[PerformanceMonitor] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(config, policy=policy, cache=cache, monitor=monitor, transport=transport)
        self._secret_key = config.secret_key
        self._clock = clock
        self._access_token: Optional[AccessToken] = None

    @property
    def token_url(self) -> str:
        return f"{self._base_url}{self.TOKEN_PATH}"

    @property
    def chat_url(self) -> str:
        return f"{self._base_url}{self.CHAT_PATH}/{self.model}"

    async def get_access_token(self) -> str:
        """Return a cached access token, exchanging credentials when needed."""
        now = self._clock()
        if self._access_token and self._access_token.is_valid(now):
            return self._access_token.token

        logger.info("Requesting a new ERNIE access token")
        data = await self._post(
            self.token_url,
            json=None,
            params={
                "grant_type": "client_credentials",
                "client_id": self._api_key,
                "client_secret": self._secret_key,
            },
        )

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError(
                f"Unable to obtain an ERNIE access token: {payload_preview(data)}",
                gateway=self.name,
                payload=payload_preview(data),
            )

        expires_in = float(data.get("expires_in", 0))
        self._access_token = AccessToken(token=token, expires_at=self._clock() + expires_in)
        return token

    def invalidate_token(self) -> None:
        self._access_token = None

    def _check_vendor_error(self, data: Dict[str, Any]) -> None:
        """ERNIE reports many failures as HTTP 200 with an error_code body."""
        error_code = data.get("error_code")
        if error_code is None:
            return

        message = f"{self.name} API error {error_code}: {data.get('error_msg', '')}"
        payload = payload_preview(data)
        if error_code in AUTH_ERROR_CODES:
            self.invalidate_token()
            raise AuthenticationError(message, gateway=self.name, payload=payload)
        if error_code in RATE_LIMIT_ERROR_CODES:
            raise RateLimitError(message, gateway=self.name, payload=payload)
        raise ProviderHTTPError(message, gateway=self.name, payload=payload)

    async def _request_completion(self, prompt: str) -> CompletionResult:
        token = await self.get_access_token()

        request = CompletionRequest.from_prompt(
            self.model,
            prompt,
            temperature=self.TEMPERATURE,
            top_p=self.TOP_P,
            max_tokens=self.max_tokens,
        )

        data = await self._post(
            self.chat_url,
            json=request.to_ernie_format(),
            params={"access_token": token},
        )
        if isinstance(data, dict):
            self._check_vendor_error(data)

        result = CompletionResult.from_ernie(data, gateway=self.name)
        result.model = self.model
        return result
