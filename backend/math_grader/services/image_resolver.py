"""
Image resolution for the grading pipeline.

Turns an image reference into something the vision API accepts: remote URLs
pass through (the provider downloads them), local files are inlined as
base64 data URIs.
"""

import asyncio
import base64
from pathlib import Path
from typing import Iterable, List, Optional, Union

from math_grader.core.config import DEFAULT_PLACEHOLDER_URL_PATTERNS
from math_grader.core.exceptions import ImageResolutionError
from math_grader.core.logging import get_logger
from math_grader.schemas.grading import LocalImage, RemoteImage

logger = get_logger("image_resolver")


def guess_image_mime_type(path: str) -> str:
    """
    Infer the MIME type of an image from its file extension.

    Args:
        path: File path or name.

    Returns:
        ``image/jpeg`` for jpg/jpeg, otherwise ``image/<ext>`` (``image/png``
        when there is no extension).
    """
    ext = Path(path).suffix.lstrip(".").lower() or "png"
    if ext in ("jpg", "jpeg"):
        return "image/jpeg"
    return f"image/{ext}"


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Build a ``data:{mime};base64,{payload}`` URI."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


class ImageResolver:
    """
    Resolves image references for the chat completion request.

    Per-image failures are logged and reported as None so a single broken
    image never fails the whole grading call.
    """

    def __init__(self, placeholder_patterns: Optional[Iterable[str]] = None):
        if placeholder_patterns is None:
            placeholder_patterns = DEFAULT_PLACEHOLDER_URL_PATTERNS
        self.placeholder_patterns: List[str] = [
            p.lower() for p in placeholder_patterns if p
        ]

    def is_placeholder_url(self, url: str) -> bool:
        lowered = url.lower()
        return any(pattern in lowered for pattern in self.placeholder_patterns)

    def check_url(self, image: RemoteImage) -> str:
        """Return the URL unchanged, or raise if it matches a placeholder pattern."""
        if self.is_placeholder_url(image.url):
            raise ImageResolutionError(
                f"Skipping invalid/placeholder URL: {image.url}", image.url
            )
        return image.url

    async def load_local(self, image: LocalImage) -> str:
        """Read a local image file and return it as a base64 data URI."""
        try:
            data = await asyncio.to_thread(Path(image.path).read_bytes)
        # ValueError covers paths pathlib rejects outright (embedded NUL byte)
        except (OSError, ValueError) as e:
            raise ImageResolutionError(
                f"Cannot read image file: {image.path} ({e})", image.path
            ) from e
        return encode_data_uri(data, guess_image_mime_type(image.path))

    async def resolve(self, image: Union[RemoteImage, LocalImage]) -> Optional[str]:
        """
        Resolve one image reference.

        Args:
            image: Remote or local image reference.

        Returns:
            URL or data URI usable in an ``image_url`` content block, or None
            if the image should be skipped.
        """
        try:
            if isinstance(image, RemoteImage):
                return self.check_url(image)
            return await self.load_local(image)
        except ImageResolutionError as e:
            if isinstance(image, RemoteImage):
                logger.warning(e.message)
            else:
                logger.error("Failed to convert local image to base64: %s", e.message)
            return None
