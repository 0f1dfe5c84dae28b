"""
API endpoint for AI grading of a submission.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from math_grader.core.config import get_config
from math_grader.core.exceptions import InvalidGradingRequestError
from math_grader.core.logging import get_logger
from math_grader.schemas.grading import GradeSubmissionRequest, GradeSubmissionResponse
from math_grader.services.ai_grading import AIGradingService, get_ai_grading_service
from math_grader.services.grading_fallback import build_degraded_result, describe_error

logger = get_logger("api")

router = APIRouter(prefix="/grading", tags=["grading"])


def get_grading_service(request: Request) -> AIGradingService:
    """Grading service bound to the application's shared HTTP client."""
    http_client = getattr(request.app.state, "http_client", None)
    return get_ai_grading_service(get_config().ai, http_client=http_client)


@router.post("/grade", response_model=GradeSubmissionResponse)
async def grade_submission(
    body: GradeSubmissionRequest,
    service: AIGradingService = Depends(get_grading_service),
):
    """
    Grade a submission with AI.

    Always answers 200 with a grading result: when the AI call fails the
    result is a degraded one explaining the failure. Only a request with
    nothing to grade is rejected (400).
    """
    try:
        result = await service.grade(body.to_grading_request())
        return GradeSubmissionResponse(ai_result=result)
    except InvalidGradingRequestError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        logger.error(
            "AI grading failed: status=%s, type=%s, message=%s",
            getattr(e, "status_code", None),
            type(e).__name__,
            e,
            exc_info=True,
        )
        error = describe_error(e) if get_config().server.debug else None
        return GradeSubmissionResponse(
            ai_result=build_degraded_result(e),
            degraded=True,
            error=error,
        )
