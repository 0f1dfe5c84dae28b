"""
AI grading service for handwritten math submissions.
"""

import asyncio
from typing import Optional, Sequence, Union

import httpx

from math_grader.core.config import AISettings, get_config
from math_grader.core.exceptions import (
    ConfigurationError,
    GradingTimeoutError,
    InvalidGradingRequestError,
)
from math_grader.core.logging import get_logger
from math_grader.schemas.grading import (
    GradingRequest,
    GradingResult,
    LocalImage,
    RemoteImage,
)
from math_grader.services.ai_prompts import TUTOR_PROMPT
from math_grader.services.ai_providers import ChatCompletionProvider, OpenAIChatProvider
from math_grader.services.content_assembler import assemble_user_content, is_image_block
from math_grader.services.grading_response import parse_grading_response
from math_grader.services.image_resolver import ImageResolver

logger = get_logger("ai_grading")

ImageInput = Union[str, RemoteImage, LocalImage]


def not_configured_result() -> GradingResult:
    """Stub result returned when no API key is configured."""
    return GradingResult(
        summary="AI grading not configured. Please set OPENAI_API_KEY.",
        score=0,
        mistakes=[],
        next_steps=["Configure OpenAI API key to enable AI grading"],
    )


class AIGradingService:
    """
    Grades a submission: assemble content, resolve images, call the provider,
    validate the reply.

    The provider (or the HTTP client used to build the default one) is passed
    in by the caller. Without either, each call opens its own short-lived
    httpx client.
    """

    def __init__(
        self,
        settings: AISettings,
        provider: Optional[ChatCompletionProvider] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        resolver: Optional[ImageResolver] = None,
        system_prompt: str = TUTOR_PROMPT,
    ):
        self.settings = settings
        if provider is None and http_client is not None:
            provider = OpenAIChatProvider(settings, http_client)
        self.provider = provider
        self.resolver = resolver or ImageResolver(settings.placeholder_url_patterns)
        self.system_prompt = system_prompt

    def _require_api_key(self) -> None:
        if not self.settings.is_configured:
            raise ConfigurationError("OpenAI API key not configured", code="not_configured")
        if not self.settings.api_key.startswith("sk-"):
            logger.warning("OpenAI API key format may be incorrect (should start with 'sk-')")

    async def _run(
        self,
        provider: ChatCompletionProvider,
        request: GradingRequest,
        max_retries: Optional[int],
    ) -> GradingResult:
        content = await assemble_user_content(request, self.resolver)
        image_count = sum(1 for block in content if is_image_block(block))
        logger.info(
            "Calling AI: model=%s, kind=%s, blocks=%d, images=%d",
            self.settings.model,
            self.settings.model_kind.value,
            len(content),
            image_count,
        )

        body = await provider.complete(
            content,
            system_prompt=self.system_prompt,
            max_retries=max_retries,
        )
        result = parse_grading_response(body)
        logger.info("AI grading complete: score=%s", result.score)
        return result

    async def _run_with_default_provider(
        self, request: GradingRequest, max_retries: Optional[int]
    ) -> GradingResult:
        if self.provider is not None:
            return await self._run(self.provider, request, max_retries)
        async with httpx.AsyncClient() as client:
            provider = OpenAIChatProvider(self.settings, client)
            return await self._run(provider, request, max_retries)

    async def grade(
        self,
        request: GradingRequest,
        max_retries: Optional[int] = None,
    ) -> GradingResult:
        """
        Grade one submission.

        Args:
            request: Question, model solution and student images.
            max_retries: Retries on rate limiting (configured default if None).

        Returns:
            Validated grading result, or the "not configured" stub when no
            API key is set.

        Raises:
            InvalidGradingRequestError: Nothing to grade.
            RateLimitError, TransportError, MalformedResponseError: From the
                provider call and reply validation.
        """
        try:
            self._require_api_key()
        except ConfigurationError as e:
            logger.warning("%s. Returning stub response.", e.message)
            return not_configured_result()

        if not request.has_content():
            raise InvalidGradingRequestError(
                "At least one of question_text, model_solution_text, "
                "or student_images must be provided",
                status_code=400,
            )

        timeout = self.settings.request_timeout_seconds
        if not timeout:
            return await self._run_with_default_provider(request, max_retries)
        try:
            return await asyncio.wait_for(
                self._run_with_default_provider(request, max_retries), timeout
            )
        except asyncio.TimeoutError as e:
            raise GradingTimeoutError(
                f"AI grading did not finish within {timeout}s"
            ) from e

    async def grade_submission(
        self,
        student_images: Sequence[ImageInput],
        model_solution_text: Optional[str] = None,
        question_text: Optional[str] = None,
        question_images: Optional[Sequence[ImageInput]] = None,
        model_solution_images: Optional[Sequence[ImageInput]] = None,
        max_retries: Optional[int] = None,
    ) -> GradingResult:
        """Grade a submission from its stored image references and assignment fields."""
        request = GradingRequest(
            student_images=list(student_images or []),
            model_solution_text=model_solution_text,
            question_text=question_text,
            question_images=list(question_images or []),
            model_solution_images=list(model_solution_images or []),
        )
        return await self.grade(request, max_retries=max_retries)


def get_ai_grading_service(
    settings: Optional[AISettings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> AIGradingService:
    """Get an AI grading service instance.

    Args:
        settings: AI settings; defaults to the loaded application config.
        http_client: Shared HTTP client for provider calls.
    """
    if settings is None:
        settings = get_config().ai
    return AIGradingService(settings, http_client=http_client)
