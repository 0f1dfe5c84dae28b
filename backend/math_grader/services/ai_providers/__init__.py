"""
Chat completion providers. The grading service talks to them only through
the ChatCompletionProvider interface.
"""

from .interface import ChatCompletionProvider
from .openai_chat import OpenAIChatProvider, compute_retry_delay_ms

__all__ = [
    "ChatCompletionProvider",
    "OpenAIChatProvider",
    "compute_retry_delay_ms",
]
