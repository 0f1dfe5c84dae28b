"""
Builds the multimodal user message for a grading request.
"""

from typing import Any, Dict, List, Sequence

from math_grader.core.logging import get_logger
from math_grader.schemas.grading import GradingRequest, ImageReference
from math_grader.services.image_resolver import ImageResolver

logger = get_logger("content_assembler")

ContentBlock = Dict[str, Any]


def text_block(text: str) -> ContentBlock:
    return {"type": "text", "text": text}


def image_block(url: str) -> ContentBlock:
    return {"type": "image_url", "image_url": {"url": url}}


def is_image_block(block: ContentBlock) -> bool:
    return block.get("type") == "image_url"


async def _labelled_images(
    images: Sequence[ImageReference],
    label: str,
    resolver: ImageResolver,
) -> List[ContentBlock]:
    blocks: List[ContentBlock] = []
    for idx, image in enumerate(images, start=1):
        url = await resolver.resolve(image)
        if not url:
            logger.warning("Skipping invalid %s #%d", label.lower(), idx)
            continue
        blocks.append(text_block(f"{label} #{idx}:"))
        blocks.append(image_block(url))
    return blocks


async def assemble_user_content(
    request: GradingRequest,
    resolver: ImageResolver,
) -> List[ContentBlock]:
    """
    Assemble the ordered content blocks for the user message.

    Order: question text, question images, model solution text, model solution
    images, student image count, student images. Absent fields and images that
    fail to resolve are left out; the remaining images keep their input order.

    Args:
        request: Grading request.
        resolver: Image resolver used for every image reference.

    Returns:
        List of OpenAI content parts (text and image_url blocks).
    """
    content: List[ContentBlock] = []

    if (request.question_text or "").strip():
        content.append(text_block(f"Question (text): {request.question_text}"))

    content.extend(
        await _labelled_images(request.question_images, "Question image", resolver)
    )

    if (request.model_solution_text or "").strip():
        content.append(
            text_block(
                f"Teacher model solution (text): {request.model_solution_text}"
            )
        )

    content.extend(
        await _labelled_images(
            request.model_solution_images, "Teacher model solution image", resolver
        )
    )

    if request.student_images:
        content.append(
            text_block(
                f"Student submitted {len(request.student_images)} handwritten "
                "image(s). Please grade these images:"
            )
        )
        for idx, image in enumerate(request.student_images, start=1):
            url = await resolver.resolve(image)
            if not url:
                logger.warning("Skipping invalid student image #%d", idx)
                continue
            content.append(image_block(url))

    return content
