"""
Tests for the multimodal user content assembly.
"""

import pytest

from math_grader.schemas.grading import GradingRequest
from math_grader.services.content_assembler import assemble_user_content
from math_grader.services.image_resolver import ImageResolver


def _texts(content):
    return [block["text"] for block in content if block["type"] == "text"]


def _urls(content):
    return [block["image_url"]["url"] for block in content if block["type"] == "image_url"]


class TestAssembleUserContent:
    """Tests for assemble_user_content()."""

    @pytest.mark.asyncio
    async def test_full_order(self):
        request = GradingRequest(
            question_text="Giải phương trình $x^2 - 5x + 6 = 0$",
            question_images=["https://cdn.local/q1.png"],
            model_solution_text="$x = 2$ hoặc $x = 3$",
            model_solution_images=["https://cdn.local/s1.png"],
            student_images=["https://cdn.local/st1.png", "https://cdn.local/st2.png"],
        )
        content = await assemble_user_content(request, ImageResolver())

        assert [block["type"] for block in content] == [
            "text",
            "text",
            "image_url",
            "text",
            "text",
            "image_url",
            "text",
            "image_url",
            "image_url",
        ]
        assert content[0]["text"] == "Question (text): Giải phương trình $x^2 - 5x + 6 = 0$"
        assert content[1]["text"] == "Question image #1:"
        assert content[3]["text"] == "Teacher model solution (text): $x = 2$ hoặc $x = 3$"
        assert content[4]["text"] == "Teacher model solution image #1:"
        assert content[6]["text"] == (
            "Student submitted 2 handwritten image(s). Please grade these images:"
        )
        assert _urls(content) == [
            "https://cdn.local/q1.png",
            "https://cdn.local/s1.png",
            "https://cdn.local/st1.png",
            "https://cdn.local/st2.png",
        ]

    @pytest.mark.asyncio
    async def test_absent_fields_are_skipped(self):
        request = GradingRequest(student_images=["https://cdn.local/st1.png"])
        content = await assemble_user_content(request, ImageResolver())

        assert _texts(content) == [
            "Student submitted 1 handwritten image(s). Please grade these images:"
        ]
        assert _urls(content) == ["https://cdn.local/st1.png"]

    @pytest.mark.asyncio
    async def test_placeholder_images_never_appear(self):
        request = GradingRequest(
            question_text="Tính $2 + 3$",
            question_images=["https://example.com/q.png", "https://cdn.local/q2.png"],
            student_images=["https://cdn.local/mock-1.jpg", "https://cdn.local/st.png"],
        )
        content = await assemble_user_content(request, ImageResolver())

        urls = _urls(content)
        assert "https://example.com/q.png" not in urls
        assert "https://cdn.local/mock-1.jpg" not in urls
        # label numbering follows the input position
        assert "Question image #1:" not in _texts(content)
        assert "Question image #2:" in _texts(content)
        # announced count is the number submitted
        assert "Student submitted 2 handwritten image(s)." in _texts(content)[-1]

    @pytest.mark.asyncio
    async def test_failed_images_keep_remaining_order(self, tmp_path):
        first = tmp_path / "a.png"
        third = tmp_path / "c.png"
        first.write_bytes(b"A")
        third.write_bytes(b"C")
        request = GradingRequest(
            student_images=[str(first), str(tmp_path / "missing.png"), str(third)],
        )
        content = await assemble_user_content(request, ImageResolver())

        assert _urls(content) == [
            "data:image/png;base64,QQ==",
            "data:image/png;base64,Qw==",
        ]

    @pytest.mark.asyncio
    async def test_empty_strings_are_dropped(self):
        request = GradingRequest(
            question_text="Tính $1 + 1$",
            question_images=["", None],
            student_images=[],
        )
        content = await assemble_user_content(request, ImageResolver())
        assert content == [{"type": "text", "text": "Question (text): Tính $1 + 1$"}]

    @pytest.mark.asyncio
    async def test_whitespace_only_text_is_skipped(self):
        request = GradingRequest(
            question_text="   ",
            model_solution_text="\n\t",
            student_images=["https://cdn.local/st1.png"],
        )
        content = await assemble_user_content(request, ImageResolver())

        assert _texts(content) == [
            "Student submitted 1 handwritten image(s). Please grade these images:"
        ]
