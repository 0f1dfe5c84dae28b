"""
Services package initialization.
"""

from math_grader.services.ai_grading import AIGradingService, get_ai_grading_service
from math_grader.services.grading_fallback import build_degraded_result
from math_grader.services.image_resolver import ImageResolver

__all__ = [
    "AIGradingService",
    "get_ai_grading_service",
    "build_degraded_result",
    "ImageResolver",
]
