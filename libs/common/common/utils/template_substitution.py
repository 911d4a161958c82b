"""Merge-tag substitution for administrator-written email templates.

Templates use exact ``{{tag}}`` placeholders (no whitespace inside the braces,
case-sensitive). Every recognised tag has a fallback used when the value is
missing or empty. Anything else that looks like a tag is left untouched.

Example usage:
    apply_merge_tags("Hi {{name}}, welcome to {{course_name}}!", MergeData(name="Jo", course_name="Capacity 101"))
    # Result: "Hi Jo, welcome to Capacity 101!"
"""

import re
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_LOGIN_URL = "http://localhost:8000/login"


class MergeData(BaseModel):
    """Values available to email templates."""

    name: str | None = None
    email: str | None = None
    course_name: str | None = None
    cohort_name: str | None = None
    start_date: str | None = None
    facilitator_name: str | None = None
    login_url: str | None = None
    lesson_title: str | None = None


class MergeTag(BaseModel):
    tag: str
    label: str
    description: str
    fallback: str = Field(default="", exclude=True)


MERGE_TAGS: dict[str, MergeTag] = {
    "name": MergeTag(tag="{{name}}", label="Name", description="Participant's name", fallback="there"),
    "email": MergeTag(tag="{{email}}", label="Email", description="Participant's email", fallback=""),
    "course_name": MergeTag(tag="{{course_name}}", label="Course", description="Course title", fallback="the program"),
    "cohort_name": MergeTag(tag="{{cohort_name}}", label="Cohort", description="Cohort name", fallback="your cohort"),
    "start_date": MergeTag(tag="{{start_date}}", label="Start Date", description="Cohort start date", fallback="TBD"),
    "facilitator_name": MergeTag(
        tag="{{facilitator_name}}", label="Facilitator", description="Lead facilitator name", fallback="your facilitator"
    ),
    "login_url": MergeTag(tag="{{login_url}}", label="Login URL", description="Link to sign in", fallback=DEFAULT_LOGIN_URL),
    "lesson_title": MergeTag(tag="{{lesson_title}}", label="Lesson", description="Next lesson title", fallback="your next lesson"),
}

_TAG_PATTERN = re.compile(r"\{\{(" + "|".join(re.escape(name) for name in MERGE_TAGS) + r")\}\}")


def apply_merge_tags(template: str, data: MergeData | dict[str, Any], login_url: str | None = None) -> str:
    """Replace recognised merge tags in `template`.

    Args:
        template: Template text with ``{{tag}}`` placeholders
        data: Merge values, as a model or plain dict
        login_url: Fallback for ``{{login_url}}`` when `data` carries none

    Returns:
        The rendered text
    """
    if not template:
        return template

    values = data.model_dump() if isinstance(data, MergeData) else MergeData.model_validate(data).model_dump()

    def _replace(match: re.Match[str]) -> str:
        tag_name = match.group(1)
        value = values.get(tag_name)
        if value:
            return str(value)
        if tag_name == "login_url" and login_url:
            return login_url
        return MERGE_TAGS[tag_name].fallback

    return _TAG_PATTERN.sub(_replace, template)
