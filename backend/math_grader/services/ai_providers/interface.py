"""
Common interface for chat completion providers.

The grading service only talks to providers through this interface, so
tests and alternative backends can be swapped in without touching it.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class ChatCompletionProvider(Protocol):
    """
    Chat completion provider accepting multimodal user content.

    Implementations are constructed explicitly from resolved settings and an
    HTTP client, and expose a single completion method.
    """

    async def complete(
        self,
        user_content: List[Dict[str, Any]],
        *,
        system_prompt: str,
        max_retries: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Send one grading request and return the raw provider response body.

        Args:
            user_content: Ordered text/image_url content blocks.
            system_prompt: System instructions for the model.
            max_retries: Retries allowed on rate limiting; implementation
                default when None.

        Returns:
            Decoded JSON response body.

        Raises:
            RateLimitError: Still rate limited after all retries.
            TransportError: Network failure or non-429 HTTP error.
            MalformedResponseError: Response body is not JSON.
        """
        ...
