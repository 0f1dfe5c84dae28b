"""
Schemas for the grading pipeline and the grading API.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RemoteImage(BaseModel):
    """Image the provider fetches itself (e.g. an S3 URL)."""

    kind: Literal["url"] = "url"
    url: str


class LocalImage(BaseModel):
    """Image stored on local disk, sent inline as a data URI."""

    kind: Literal["file"] = "file"
    path: str


ImageReference = Annotated[Union[RemoteImage, LocalImage], Field(discriminator="kind")]


def is_url(value: str) -> bool:
    """Return True for http(s) URLs, False for anything else (local paths)."""
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def image_reference_from_str(value: str) -> Union[RemoteImage, LocalImage]:
    """Build an image reference from a stored URL or local path string."""
    if is_url(value):
        return RemoteImage(url=value)
    return LocalImage(path=value)


def _coerce_image_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, (str, dict, RemoteImage, LocalImage)):
        value = [value]
    coerced = []
    for item in value:
        if not item:
            continue
        if isinstance(item, str):
            item = image_reference_from_str(item)
        coerced.append(item)
    return coerced


class GradingRequest(BaseModel):
    """Everything the grader needs to assess one submission."""

    student_images: List[ImageReference] = Field(default_factory=list)
    model_solution_text: Optional[str] = None
    question_text: Optional[str] = None
    question_images: List[ImageReference] = Field(default_factory=list)
    model_solution_images: List[ImageReference] = Field(default_factory=list)

    model_config = ConfigDict(protected_namespaces=())

    @field_validator(
        "student_images", "question_images", "model_solution_images", mode="before"
    )
    @classmethod
    def _accept_plain_strings(cls, value: Any) -> Any:
        return _coerce_image_list(value)

    def has_content(self) -> bool:
        """At least one of question text, model solution text or student images."""
        return bool(
            (self.question_text or "").strip()
            or (self.model_solution_text or "").strip()
            or self.student_images
        )


class PracticeProblem(BaseModel):
    """A practice exercise with its worked solution."""

    model_config = ConfigDict(frozen=True)

    problem: str
    solution: str


class PracticeSets(BaseModel):
    """Follow-up exercises; the prompt asks for four of each."""

    model_config = ConfigDict(frozen=True)

    similar: List[PracticeProblem] = Field(default_factory=list)
    remedial: List[PracticeProblem] = Field(default_factory=list)


class GradingResult(BaseModel):
    """Structured feedback for one graded submission."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    summary: str = Field(..., min_length=1)
    score: float = Field(..., ge=0, le=10, strict=True)
    mistakes: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list, alias="nextSteps")
    practice_sets: PracticeSets = Field(
        default_factory=PracticeSets, alias="practiceSets"
    )


class GradeSubmissionRequest(BaseModel):
    """Request body for POST /grading/grade."""

    student_images: List[str] = Field(
        default_factory=list, description="Student image URLs or stored paths"
    )
    question_text: Optional[str] = Field(None, description="Question text")
    model_solution_text: Optional[str] = Field(
        None, description="Teacher model solution text"
    )
    question_images: List[str] = Field(
        default_factory=list, description="Question image URLs or paths"
    )
    model_solution_images: List[str] = Field(
        default_factory=list, description="Model solution image URLs or paths"
    )

    model_config = ConfigDict(protected_namespaces=())

    def to_grading_request(self) -> GradingRequest:
        return GradingRequest(
            student_images=self.student_images,
            model_solution_text=self.model_solution_text,
            question_text=self.question_text,
            question_images=self.question_images,
            model_solution_images=self.model_solution_images,
        )


class GradingErrorInfo(BaseModel):
    """Failure details exposed in debug mode only."""

    status: Optional[int] = None
    message: str
    type: str


class GradeSubmissionResponse(BaseModel):
    """Response model for a grading call."""

    ai_result: GradingResult
    degraded: bool = False
    error: Optional[GradingErrorInfo] = None
