"""Claude API client with request throttling and retries.

Wraps the Anthropic Messages API behind a single ``generate`` call used
for both the semantic project analysis and documentation text. Requests
are spaced to stay under the configured requests-per-minute, rate-limit
and server errors are retried with exponential backoff (honoring the
server's ``retry-after`` hint when present), and token usage is
accumulated across calls.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

import anthropic

from leaflet.utils.config import APIConfig

logger = logging.getLogger(__name__)

_MAX_RETRY_AFTER = 60.0


@dataclass
class TokenUsage:
    """Token usage statistics for one or more API calls.

    Attributes:
        input_tokens: Number of prompt tokens.
        output_tokens: Number of generated tokens.
    """

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed."""
        return self.input_tokens + self.output_tokens

    def add(self, other: "TokenUsage") -> None:
        """Accumulate another usage record into this one."""
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens


@dataclass
class GenerationResult:
    """Result of an LLM generation call.

    Attributes:
        content: The generated text.
        usage: Token usage of this call.
        model: Model that produced the result.
        stop_reason: Reason the generation stopped.
    """

    content: str
    usage: TokenUsage
    model: str
    stop_reason: Optional[str] = None


class RequestThrottle:
    """Spaces consecutive requests to respect a requests-per-minute limit."""

    def __init__(self, requests_per_minute: int) -> None:
        self.interval = 60.0 / max(requests_per_minute, 1)
        self._last_request = 0.0

    def wait(self) -> None:
        """Sleep until the next request is allowed, then claim the slot."""
        remaining = self.interval - (time.monotonic() - self._last_request)
        if remaining > 0:
            logger.debug("Throttling: sleeping %.2f seconds", remaining)
            time.sleep(remaining)
        self._last_request = time.monotonic()


def _retry_after(error: anthropic.APIStatusError) -> Optional[float]:
    """Read a numeric retry-after header from an API error, if any."""
    headers = getattr(error.response, "headers", None) or {}
    value = headers.get("retry-after")
    try:
        return min(float(value), _MAX_RETRY_AFTER) if value is not None else None
    except (TypeError, ValueError):
        return None


class LLMClient:
    """Client for the Anthropic Claude API."""

    def __init__(
        self, config: Optional[APIConfig] = None, api_key: Optional[str] = None
    ) -> None:
        """Initialize the LLM client.

        No connection is made and no key is required until the first
        request.

        Args:
            config: API configuration. Uses defaults if not provided.
            api_key: Explicit API key. Falls back to ANTHROPIC_API_KEY.
        """
        self.config = config or APIConfig()
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY", "")
        self._client: Optional[anthropic.Anthropic] = None
        self._throttle = RequestThrottle(self.config.rate_limit_rpm)
        self._total_usage = TokenUsage()

    @property
    def has_api_key(self) -> bool:
        """Whether an API key is available."""
        return bool(self._api_key)

    @property
    def client(self) -> anthropic.Anthropic:
        """The Anthropic SDK client, created on first access.

        Raises:
            ValueError: If no API key is available.
        """
        if self._client is None:
            if not self._api_key:
                raise ValueError(
                    "ANTHROPIC_API_KEY environment variable is not set. "
                    "Set it or pass --api-key before making API calls."
                )
            self._client = anthropic.Anthropic(api_key=self._api_key)
        return self._client

    @property
    def total_usage(self) -> TokenUsage:
        """Cumulative token usage across all calls."""
        return self._total_usage

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> GenerationResult:
        """Send a single-turn prompt and return the model's text.

        Args:
            prompt: The user message.
            system: Optional system prompt.
            max_tokens: Maximum tokens to generate. Uses config default.
            temperature: Sampling temperature. Uses config default.

        Returns:
            A GenerationResult with the concatenated text blocks.

        Raises:
            ValueError: If the API key is not set.
            anthropic.APIError: If the request fails after all retries.
        """
        request: dict = {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": self.config.temperature if temperature is None else temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system

        response = self._send(request)

        usage = TokenUsage(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        self._total_usage.add(usage)
        logger.info(
            "Generated %d tokens with %s (input: %d, output: %d)",
            usage.total_tokens,
            response.model,
            usage.input_tokens,
            usage.output_tokens,
        )

        return GenerationResult(
            content="".join(
                block.text for block in response.content if hasattr(block, "text")
            ),
            usage=usage,
            model=response.model,
            stop_reason=response.stop_reason,
        )

    def _send(self, request: dict) -> anthropic.types.Message:
        """Create a message, retrying rate-limit and 5xx errors.

        Client errors (4xx other than 429) are raised immediately.

        Raises:
            anthropic.APIStatusError: The last error once all attempts
                are used, or the first non-retryable one.
        """
        attempts = max(self.config.retry_max_attempts, 1)

        for attempt in range(1, attempts):
            self._throttle.wait()
            try:
                return self.client.messages.create(**request)
            except anthropic.APIStatusError as e:
                if not (isinstance(e, anthropic.RateLimitError) or e.status_code >= 500):
                    raise
                delay = _retry_after(e)
                if delay is None:
                    delay = self.config.retry_base_delay * 2 ** (attempt - 1)
                logger.warning(
                    "API returned %s (attempt %d/%d), retrying in %.1f seconds",
                    e.status_code,
                    attempt,
                    attempts,
                    delay,
                )
                time.sleep(delay)

        self._throttle.wait()
        return self.client.messages.create(**request)
