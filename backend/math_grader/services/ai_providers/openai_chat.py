"""
OpenAI-compatible chat completions provider with rate-limit retries.
"""

import asyncio
import copy
import json
import logging
import math
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from math_grader.core.config import AISettings
from math_grader.core.exceptions import (
    MalformedResponseError,
    RateLimitError,
    TransportError,
)
from math_grader.core.logging import get_logger

logger = get_logger("openai_chat")

BASE_RETRY_DELAY_MS = 1000
MAX_RETRY_DELAY_MS = 16000

REASONING_IMAGE_NOTE = (
    "\n[Note: Student submitted images but reasoning models cannot process "
    "images. Please analyze based on text descriptions provided above.]"
)


def is_rate_limit_message(message: Optional[str]) -> bool:
    """True if an error message looks like a rate-limit rejection."""
    if not message:
        return False
    lowered = message.lower()
    return "429" in lowered or "rate limit" in lowered


def compute_retry_delay_ms(retry_after: Optional[str], attempt: int) -> int:
    """
    Delay before the next attempt.

    Args:
        retry_after: Value of the provider's ``retry-after`` header, in seconds.
        attempt: Zero-based index of the attempt that was rate limited.

    Returns:
        Delay in milliseconds: the header value when it is a number of
        seconds, otherwise exponential backoff (1s, 2s, 4s, ... capped at 16s).
    """
    if retry_after:
        try:
            seconds = float(retry_after)
        except ValueError:
            seconds = None
        if seconds is not None and math.isfinite(seconds):
            return max(0, int(seconds * 1000))
        logger.debug("Ignoring unusable retry-after header: %s", retry_after)
    return min(BASE_RETRY_DELAY_MS * 2**attempt, MAX_RETRY_DELAY_MS)


def strip_image_blocks(user_content: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop image_url blocks, leaving a note when any were removed."""
    text_only = [block for block in user_content if block.get("type") != "image_url"]
    if len(text_only) != len(user_content):
        text_only.append({"type": "text", "text": REASONING_IMAGE_NOTE})
    return text_only


def redact_payload(body: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a request body with inline base64 image data replaced, for logging."""
    redacted = copy.deepcopy(body)
    for message in redacted.get("messages", []):
        content = message.get("content")
        if not isinstance(content, list):
            continue
        for block in content:
            url = (block.get("image_url") or {}).get("url", "")
            if block.get("type") == "image_url" and url.startswith("data:"):
                block["image_url"] = {"url": "[BASE64_DATA...]"}
    return redacted


class OpenAIChatProvider:
    """
    Provider for OpenAI-compatible ``/chat/completions`` endpoints.

    The HTTP client and the sleep function are injected; the caller owns the
    client's lifecycle.
    """

    def __init__(
        self,
        settings: AISettings,
        http_client: httpx.AsyncClient,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._settings = settings
        self._client = http_client
        self._sleep = sleep

    @property
    def endpoint(self) -> str:
        return f"{self._settings.base_url.rstrip('/')}/chat/completions"

    def build_request_body(
        self,
        user_content: List[Dict[str, Any]],
        system_prompt: str,
    ) -> Dict[str, Any]:
        """
        Build the chat completion request body.

        Reasoning models get text-only content and no temperature.
        """
        content = user_content
        if self._settings.is_reasoning_model:
            content = strip_image_blocks(user_content)
            if len(content) != len(user_content):
                logger.warning(
                    "Reasoning model %s does not support vision input. Images will be ignored.",
                    self._settings.model,
                )

        body: Dict[str, Any] = {
            "model": self._settings.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": content},
            ],
            "response_format": {"type": "json_object"},
        }
        if not self._settings.is_reasoning_model:
            body["temperature"] = self._settings.temperature
        return body

    async def _send(self, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._settings.api_key}"}
        try:
            response = await self._client.post(
                self.endpoint,
                json=body,
                headers=headers,
                timeout=self._settings.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"AI provider request timed out: {e}", code="ETIMEDOUT"
            ) from e
        except httpx.HTTPError as e:
            if is_rate_limit_message(str(e)):
                raise RateLimitError(str(e)) from e
            code = "ECONNREFUSED" if isinstance(e, httpx.ConnectError) else type(e).__name__
            raise TransportError(f"AI provider request failed: {e}", code=code) from e

        if response.status_code == 429:
            raise RateLimitError(
                "AI provider rate limit hit (429)",
                retry_after=response.headers.get("retry-after"),
            )
        if response.is_error:
            raise TransportError(
                f"AI provider returned HTTP {response.status_code}",
                status_code=response.status_code,
                code=response.reason_phrase or None,
                response_body=response.text[:2000],
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "AI provider returned a body that is not JSON",
                content=response.text[:2000],
            ) from e

    async def complete(
        self,
        user_content: List[Dict[str, Any]],
        *,
        system_prompt: str,
        max_retries: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Send the grading request, retrying while the provider rate limits us.

        Args:
            user_content: Ordered content blocks for the user message.
            system_prompt: System instructions.
            max_retries: Extra attempts after the first one on rate limiting;
                defaults to the configured ``max_retries``.

        Returns:
            Decoded response body.
        """
        if max_retries is None:
            max_retries = self._settings.max_retries

        body = self.build_request_body(user_content, system_prompt)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Chat completion request payload:\n%s",
                json.dumps(redact_payload(body), ensure_ascii=False, indent=2),
            )

        attempt = 0
        while True:
            try:
                return await self._send(body)
            except RateLimitError as e:
                if attempt >= max_retries:
                    logger.error(
                        "Rate limit persisted after %d attempt(s); giving up",
                        attempt + 1,
                    )
                    raise RateLimitError(
                        e.message, retry_after=e.retry_after, attempts=attempt + 1
                    ) from e
                delay_ms = compute_retry_delay_ms(e.retry_after, attempt)
                logger.warning(
                    "Rate limit hit (429). Retrying in %dms (attempt %d/%d)...",
                    delay_ms,
                    attempt + 1,
                    max_retries + 1,
                )
                await self._sleep(delay_ms / 1000)
                attempt += 1
            except TransportError as e:
                logger.error(
                    "AI grading request failed: status=%s, code=%s, message=%s",
                    e.status_code,
                    e.code,
                    e.message,
                )
                raise
