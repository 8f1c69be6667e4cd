"""Blog frontmatter schema and validation.

Validation checks each field explicitly and returns a result value
instead of raising, so that one bad file never interrupts a load.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable

from blogcatalog.core.errors import ValidationError
from blogcatalog.core.models import BlogFrontmatter


@dataclass(frozen=True)
class Valid:
    data: BlogFrontmatter


@dataclass(frozen=True)
class Invalid:
    errors: list[ValidationError] = field(default_factory=list)


ValidationResult = Valid | Invalid


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def _check_text(value: Any) -> tuple[Any, str | None]:
    if not isinstance(value, str):
        return None, f"expected a string, got {_type_name(value)}"
    return value, None


def _check_title(value: Any) -> tuple[Any, str | None]:
    text, error = _check_text(value)
    if error:
        return None, error
    if not text.strip():
        return None, "must not be empty"
    return text, None


def _check_pub_date(value: Any) -> tuple[Any, str | None]:
    # YAML turns unquoted ISO dates into date/datetime objects
    if isinstance(value, datetime):
        return value.date(), None
    if isinstance(value, date):
        return value, None
    if not isinstance(value, str):
        return None, f"expected a date string, got {_type_name(value)}"
    text = value.strip()
    try:
        return date.fromisoformat(text), None
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date(), None
    except ValueError:
        return None, f"invalid date {value!r}"


def _check_tags(value: Any) -> tuple[Any, str | None]:
    if not isinstance(value, list):
        return None, f"expected a list of strings, got {_type_name(value)}"
    for index, item in enumerate(value):
        if not isinstance(item, str):
            return None, f"item {index} must be a string, got {_type_name(item)}"
    return list(value), None


# name in frontmatter -> (model attribute, required, checker)
BLOG_SCHEMA: dict[str, tuple[str, bool, Callable[[Any], tuple[Any, str | None]]]] = {
    "title": ("title", True, _check_title),
    "pubDate": ("pub_date", True, _check_pub_date),
    "description": ("description", True, _check_text),
    "author": ("author", True, _check_text),
    "tags": ("tags", True, _check_tags),
    "image": ("image", False, _check_text),
}


def validate_frontmatter(raw: Any, file_path: Path | str) -> ValidationResult:
    """Validate raw frontmatter of one file against the blog schema.

    Args:
        raw: Parsed YAML frontmatter, expected to be a mapping.
        file_path: File the frontmatter came from, used in error reports.

    Returns:
        Valid with the typed frontmatter, or Invalid listing every
        failing field.
    """
    if not isinstance(raw, Mapping):
        return Invalid(
            [
                ValidationError(
                    file_path,
                    "frontmatter",
                    f"expected a mapping, got {_type_name(raw)}",
                )
            ]
        )

    values: dict[str, Any] = {}
    errors: list[ValidationError] = []
    for key, (attr, required, check) in BLOG_SCHEMA.items():
        if raw.get(key) is None:
            if required:
                errors.append(ValidationError(file_path, key, "required field is missing"))
            continue
        value, error = check(raw[key])
        if error:
            errors.append(ValidationError(file_path, key, error))
        else:
            values[attr] = value

    if errors:
        return Invalid(errors)
    return Valid(BlogFrontmatter(**values))
