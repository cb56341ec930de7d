"""OpenAI-compatible chat completions client."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..core.config import Settings
from ..core.exceptions import EnvelopeParseError, NoCandidatesError, TransportError
from ..core.models import ChatMessage, CompletionRequest, CompletionResponse
from ..core.retry import NO_RETRY, Deadline, RetryPolicy, effective_timeout

logger = logging.getLogger(__name__)

__all__ = ["ModelClient", "parse_envelope"]


def parse_envelope(body: bytes | str) -> str:
    """Return ``choices[0].message.content`` from a completion response body.

    Raises:
        EnvelopeParseError: If the body is not a completion envelope
        NoCandidatesError: If the envelope holds no choices
    """
    try:
        envelope = CompletionResponse.model_validate_json(body)
    except ValidationError as e:
        excerpt = body[:200] if isinstance(body, str) else body[:200].decode("utf-8", errors="replace")
        logger.error(f"Failed to parse completion envelope: {excerpt}")
        raise EnvelopeParseError(f"LLM returned an invalid response envelope: {e}") from e

    if not envelope.choices:
        logger.error("Empty 'choices' array in response")
        raise NoCandidatesError("no response from the model: empty choices")

    content = envelope.choices[0].message.content or ""
    logger.debug(f"Model response length: {len(content)} chars")
    return content


class ModelClient:
    """Sends single-message prompts to the chat completions endpoint.

    Args:
        api_key: Bearer token; not validated locally
        base_url: Endpoint root, e.g. ``https://api.openai.com/v1``
        model: Model identifier sent with each request
        temperature: Sampling temperature
        timeout: Per-request timeout in seconds (None = transport default)
        retry_policy: Backoff applied to transport failures
        http_client: Optional preconfigured ``httpx.Client``
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        temperature: float = 0.7,
        timeout: Optional[float] = None,
        retry_policy: RetryPolicy = NO_RETRY,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.retry_policy = retry_policy
        self._http = http_client or httpx.Client()

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.Client] = None) -> "ModelClient":
        policy = RetryPolicy(
            max_attempts=max(1, settings.llm_max_attempts),
            initial_delay=settings.llm_backoff_seconds,
        )
        return cls(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            timeout=settings.request_timeout,
            retry_policy=policy,
            http_client=http_client,
        )

    def _request_body(self, prompt: str) -> dict:
        request = CompletionRequest(
            model=self.model,
            messages=[ChatMessage(role="user", content=prompt)],
            temperature=self.temperature,
        )
        return request.model_dump()

    def send(self, prompt: str, deadline: Optional[Deadline] = None) -> bytes:
        """POST the prompt and return the raw response body.

        Raises:
            TransportError: On connection failures, timeouts and non-2xx statuses
            DeadlineExceededError: If the deadline has already passed
        """
        timeout = effective_timeout(self.timeout, deadline, "model call")
        logger.debug(f"Calling model={self.model}, temp={self.temperature}, timeout={timeout}")

        kwargs = {}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = self._http.post(
                f"{self.base_url}/chat/completions",
                json=self._request_body(prompt),
                headers={"Authorization": f"Bearer {self.api_key}"},
                **kwargs,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Model request timed out after {timeout}s")
            raise TransportError(f"LLM request timed out after {timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Model HTTP error: {e.response.status_code} - {e.response.text[:200]}")
            raise TransportError(f"LLM request failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Model transport error: {e}")
            raise TransportError(f"Failed to reach LLM endpoint: {e}") from e
        except httpx.InvalidURL as e:
            logger.error(f"Invalid model endpoint URL {self.base_url!r}: {e}")
            raise TransportError(f"Invalid LLM endpoint URL: {e}") from e

        return response.content

    def complete(self, prompt: str, deadline: Optional[Deadline] = None) -> str:
        """Send ``prompt`` (with retries) and return the first candidate's content."""
        body = self.retry_policy.call(lambda: self.send(prompt, deadline), deadline=deadline)
        return parse_envelope(body)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ModelClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
