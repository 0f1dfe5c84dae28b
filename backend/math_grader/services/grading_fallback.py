"""
Degraded grading results for failed AI calls.

The submission flow never fails because grading failed: the error is mapped
to a zero-score result whose summary and next steps tell the student (in
Vietnamese) what went wrong. System errors are never recorded as student
mistakes.
"""

from typing import List, Optional, Tuple

from math_grader.core.exceptions import GradingError, MalformedResponseError
from math_grader.schemas.grading import GradingErrorInfo, GradingResult

DEFAULT_SUMMARY = "AI grading failed"
DEFAULT_NEXT_STEPS = ["Hệ thống đang gặp sự cố. Vui lòng liên hệ quản trị viên."]

_CONNECTION_CODES = ("ECONNREFUSED", "ETIMEDOUT")


def classify_failure(error: BaseException) -> Tuple[str, List[str]]:
    """
    Pick the localized summary and next steps for a grading failure.

    Args:
        error: Exception surfaced by the grading service.

    Returns:
        (summary, next_steps)
    """
    status = getattr(error, "status_code", None)
    code = getattr(error, "code", None)

    if status == 429:
        return (
            "AI grading tạm thời không khả dụng do quá tải. Vui lòng thử lại sau.",
            ["Vui lòng thử lại sau vài phút"],
        )
    if status == 401:
        return (
            "Lỗi xác thực API. Vui lòng kiểm tra API key.",
            ["Kiểm tra cấu hình OPENAI_API_KEY trong file .env"],
        )
    if status == 400:
        return (
            "Yêu cầu không hợp lệ. Vui lòng kiểm tra dữ liệu đầu vào.",
            ["Kiểm tra format của hình ảnh và dữ liệu assignment"],
        )
    if status in (500, 502, 503):
        return (
            "Lỗi từ phía server AI. Vui lòng thử lại sau.",
            ["Thử lại sau vài phút", "Nếu vẫn lỗi, liên hệ quản trị viên"],
        )
    if code in _CONNECTION_CODES:
        return (
            "Không thể kết nối đến server AI. Vui lòng kiểm tra kết nối mạng.",
            ["Kiểm tra kết nối internet", "Thử lại sau"],
        )
    if isinstance(error, MalformedResponseError) or "JSON" in str(error):
        return (
            "Lỗi xử lý phản hồi từ AI. Dữ liệu không hợp lệ.",
            ["Thử lại với submission khác"],
        )
    return DEFAULT_SUMMARY, list(DEFAULT_NEXT_STEPS)


def build_degraded_result(error: BaseException) -> GradingResult:
    """Zero-score result describing a grading failure."""
    summary, next_steps = classify_failure(error)
    return GradingResult(
        summary=summary,
        score=0,
        mistakes=[],
        next_steps=next_steps,
    )


def describe_error(error: BaseException) -> GradingErrorInfo:
    """Debug details for a grading failure."""
    if isinstance(error, GradingError):
        details = error.to_dict()
        return GradingErrorInfo(
            status=details["status"],
            message=details["message"],
            type=details["type"],
        )
    status: Optional[int] = getattr(error, "status_code", None)
    return GradingErrorInfo(
        status=status if isinstance(status, int) else None,
        message=str(error),
        type=type(error).__name__ or "unknown",
    )
