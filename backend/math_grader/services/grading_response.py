"""
Parsing and validation of the provider's grading reply.
"""

import json
import re
from typing import Any, Dict

from pydantic import ValidationError

from math_grader.core.exceptions import MalformedResponseError, MissingRequiredFieldsError
from math_grader.core.logging import get_logger
from math_grader.schemas.grading import GradingResult

logger = get_logger("grading_response")

# JSON object inside a markdown code fence, with optional "json" language tag
FENCED_JSON_RE = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```", re.IGNORECASE)


def extract_message_content(body: Dict[str, Any]) -> str:
    """Return ``choices[0].message.content`` from a chat completion body."""
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError(
            f"AI response has no message content: {e!r}"
        ) from e
    if not isinstance(content, str):
        raise MalformedResponseError("AI response message content is not text")
    return content


def parse_json_content(content: str) -> Any:
    """
    Parse the model's reply as JSON.

    Falls back to the first fenced code block when the reply is wrapped in
    markdown.
    """
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse AI response as JSON, trying code fence: %s", e)

    match = FENCED_JSON_RE.search(content)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                "AI response is not valid JSON", content=content
            ) from e
    raise MalformedResponseError("AI response is not valid JSON", content=content)


def _describe_errors(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(loc) for loc in err["loc"]) or "<root>"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


def validate_grading_result(data: Any) -> GradingResult:
    """Validate parsed JSON into a GradingResult."""
    try:
        return GradingResult.model_validate(data)
    except ValidationError as e:
        raise MissingRequiredFieldsError(
            f"AI response missing required fields: {_describe_errors(e)}",
            errors=e.errors(include_url=False),
        ) from e


def parse_grading_response(body: Dict[str, Any]) -> GradingResult:
    """
    Turn a raw chat completion body into a GradingResult.

    Args:
        body: Decoded provider response.

    Returns:
        Validated grading result.

    Raises:
        MalformedResponseError: No content or no parseable JSON.
        MissingRequiredFieldsError: JSON does not match the grading schema.
    """
    content = extract_message_content(body)
    return validate_grading_result(parse_json_content(content))
