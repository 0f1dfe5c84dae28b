"""
Pydantic schemas for the grading pipeline and API.
"""

from math_grader.schemas.grading import (
    GradeSubmissionRequest,
    GradeSubmissionResponse,
    GradingErrorInfo,
    GradingRequest,
    GradingResult,
    ImageReference,
    LocalImage,
    PracticeProblem,
    PracticeSets,
    RemoteImage,
    image_reference_from_str,
)

__all__ = [
    "GradeSubmissionRequest",
    "GradeSubmissionResponse",
    "GradingErrorInfo",
    "GradingRequest",
    "GradingResult",
    "ImageReference",
    "LocalImage",
    "PracticeProblem",
    "PracticeSets",
    "RemoteImage",
    "image_reference_from_str",
]
