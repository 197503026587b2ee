"""
Abstract provider interface.

Defines the contract every vendor adapter implements. Prompt templating,
caching, monitoring, deadlines and retries live here; adapters only
implement ``_request_completion``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import httpx
from opentelemetry import trace

from .cache import ResponseCache, make_cache_key
from .config import ProviderConfig, ProviderType
from .errors import (
    AuthenticationError,
    GatewayError,
    GatewayTimeoutError,
    MalformedResponseError,
    ProviderClosedError,
    ProviderHTTPError,
    RateLimitError,
    TransportError,
)
from .monitor import PerformanceMonitor
from .policy import GatewayPolicy, call_with_retry, classify_transport_error, run_with_deadline
from ..models.response import CompletionResult, payload_preview

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

CONTENT_PLACEHOLDER = "{content}"

DEFAULT_SYSTEM_PROMPT = (
    "You are a writing assistant for a blog, skilled at summarizing "
    "content and giving writing suggestions."
)


def render_template(template: str, content: str) -> str:
    """Substitute the first ``{content}`` placeholder in a template."""
    return template.replace(CONTENT_PLACEHOLDER, content, 1)


class AIProvider(ABC):
    """
    Abstract base class for AI provider adapters.

    Construction performs no I/O; the HTTP client is created on first use.
    """

    provider_type: ProviderType
    default_model: str
    default_base_url: str
    MAX_TOKENS: Optional[int] = None

    def __init__(
        self,
        config: ProviderConfig,
        policy: Optional[GatewayPolicy] = None,
        cache: Optional[ResponseCache] = None,
        monitor: Optional[PerformanceMonitor] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the provider.

        Args:
            config: Provider configuration
            policy: Timeout and retry policy
            cache: Response cache, or None to bypass caching
            monitor: Performance monitor, or None to skip instrumentation
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self._model = config.model or self.default_model
        self._base_url = (config.base_url or self.default_base_url).rstrip("/")
        self._api_key = config.api_key
        self._policy = policy or GatewayPolicy()
        self._cache = cache
        self._monitor = monitor
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._closed = False

    @property
    def name(self) -> str:
        return self.provider_type.value

    @property
    def provider(self) -> str:
        return self.provider_type.value

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def max_tokens(self) -> Optional[int]:
        """Completion token budget, from the policy table before the adapter default."""
        return self._policy.provider_max_tokens(self.name, self.MAX_TOKENS)

    @property
    def instrumented(self) -> bool:
        return self._cache is not None or self._monitor is not None

    def _default_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            headers=self._default_headers(),
            timeout=self._policy.http_timeout(),
            transport=self._transport,
        )
        logger.info(f"Connected to {self.name} at {self._base_url}")

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info(f"Disconnected from {self.name}")

    async def close(self) -> None:
        """Close the client for good; later calls fail instead of reconnecting."""
        self._closed = True
        await self.disconnect()

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def _get_client(self) -> httpx.AsyncClient:
        if self._closed:
            raise ProviderClosedError(f"{self.name} provider is closed", gateway=self.name)
        if self._client is None:
            await self.connect()
        return self._client

    async def generate_summary(self, content: str, template: str) -> str:
        """
        Generate an article summary.

        Args:
            content: Article content
            template: Prompt template containing a ``{content}`` placeholder

        Returns:
            Generated summary
        """
        result = await self.summarize(content, template)
        return result.text

    async def summarize(self, content: str, template: str) -> CompletionResult:
        """Like generate_summary, keeping the model and token usage."""
        try:
            return await self.generate(render_template(template, content), operation="summary")
        except GatewayError as e:
            logger.error(f"{self.name} summary generation failed: {e.message}")
            raise e.with_prefix("Summary generation failed")

    async def generate_writing_suggestion(self, content: str, prompt: str) -> str:
        """
        Generate writing suggestions for existing content.

        Args:
            content: Existing content
            prompt: Prompt template containing a ``{content}`` placeholder

        Returns:
            Writing suggestion
        """
        result = await self.suggest(content, prompt)
        return result.text

    async def suggest(self, content: str, prompt: str) -> CompletionResult:
        """Like generate_writing_suggestion, keeping the model and token usage."""
        try:
            return await self.generate(render_template(prompt, content))
        except GatewayError as e:
            logger.error(f"{self.name} writing suggestion failed: {e.message}")
            raise e.with_prefix("Writing suggestion failed")

    async def generate_completion(self, prompt: str, operation: Optional[str] = None) -> str:
        """Turn a prompt into generated text."""
        result = await self.generate(prompt, operation=operation)
        return result.text

    async def generate(
        self,
        prompt: str,
        operation: Optional[str] = None,
        validate: Optional[Callable[[str], Any]] = None,
    ) -> CompletionResult:
        """
        Run one completion through the cache, deadline and retry policy.

        Every call is reported to the monitor when one is attached. Cache
        hits carry no usage since no tokens were spent.

        Args:
            prompt: Final prompt text
            operation: Optional operation kind used for the deadline
            validate: Optional check on the generated text; an answer it
                rejects is neither cached nor counted as a success
        """
        request = self._monitor.start() if self._monitor else None
        cache_key = None

        with tracer.start_as_current_span("ai.completion") as span:
            span.set_attribute("ai.provider", self.name)
            span.set_attribute("ai.model", self.model)
            span.set_attribute("ai.prompt_length", len(prompt))

            try:
                self._validate_credentials()

                if self._cache is not None:
                    cache_key = make_cache_key(self.model, prompt, provider=self.name)
                    cached = await self._cache.get(cache_key)
                    if cached is not None:
                        logger.info(f"Using cached AI response, cache key: {cache_key}")
                        span.set_attribute("ai.cache_hit", True)
                        if request:
                            self._monitor.end(request, success=True, from_cache=True)
                        return CompletionResult(text=cached, model=self.model, provider=self.name)

                timeout = self._policy.resolve_timeout(self.name, len(prompt), operation)
                logger.info(f"Calling {self.name} API, model: {self.model}, timeout: {timeout:.0f}s")

                result = await call_with_retry(
                    lambda: run_with_deadline(self._request_completion(prompt), timeout, gateway=self.name),
                    self._policy,
                    gateway=self.name,
                )

                if validate is not None:
                    validate(result.text)

            except GatewayError as e:
                span.set_attribute("ai.error", e.code or type(e).__name__)
                logger.error(f"{self.name} API call failed: {e.message}")
                if request:
                    self._monitor.end(request, success=False, from_cache=False)
                raise

            if self._cache is not None:
                await self._cache.set(cache_key, result.text)

            if request:
                self._monitor.end(request, success=True, from_cache=False)

            span.set_attribute("ai.cache_hit", False)
            if result.usage is not None:
                span.set_attribute("ai.total_tokens", result.usage.total_tokens)
            return result

    def _validate_credentials(self) -> None:
        """Hook for checks that must pass before any network call."""

    @abstractmethod
    async def _request_completion(self, prompt: str) -> CompletionResult:
        """
        Perform one vendor round trip.

        Args:
            prompt: Final prompt text

        Returns:
            Parsed completion
        """
        pass

    async def _post(self, url: str, json: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        """POST JSON and return the decoded body, classifying failures."""
        client = await self._get_client()
        try:
            response = await client.post(url, json=json, **kwargs)
        except httpx.RequestError as e:
            raise self._transport_error(e)

        self._check_response_errors(response)

        try:
            return response.json()
        except ValueError:
            raise MalformedResponseError(
                f"Response is not valid JSON: {payload_preview(response.text)}",
                gateway=self.name,
                payload=payload_preview(response.text),
            )

    def _transport_error(self, error: httpx.RequestError) -> GatewayError:
        code = classify_transport_error(error)
        if isinstance(error, httpx.TimeoutException):
            return GatewayTimeoutError(
                f"{self.name} API request timed out, please check the network connection or try again later",
                gateway=self.name,
            )
        return TransportError(f"{self.name} API request failed: {error!r}", gateway=self.name, code=code)

    @staticmethod
    def _error_payload(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def _check_response_errors(self, response: httpx.Response) -> None:
        """Check response for errors and raise appropriate exceptions."""
        if response.is_success:
            return

        status = response.status_code
        payload = payload_preview(self._error_payload(response))
        logger.error(f"{self.name} API error status: {status}, body: {payload}")

        if status in (401, 403):
            raise AuthenticationError(
                f"{self.name} API rejected the credentials ({status}): {payload}",
                gateway=self.name,
                status_code=status,
                payload=payload,
            )

        if status == 429:
            raise RateLimitError(
                f"{self.name} API rate limit exceeded, please back off and retry later: {payload}",
                gateway=self.name,
                retry_after=self._retry_after(response),
                payload=payload,
            )

        raise ProviderHTTPError(
            f"{self.name} API request failed: {status} - {payload}",
            gateway=self.name,
            status_code=status,
            payload=payload,
        )

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[float]:
        value = response.headers.get("Retry-After")
        try:
            return float(value) if value else None
        except ValueError:
            return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.name!r}, model={self.model!r})"
