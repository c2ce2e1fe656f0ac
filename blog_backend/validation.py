"""
Shape and format checks for signup, blog creation and stored user records.

Each check raises ValidationError on the first failure; nothing is written
before these pass.
"""

from __future__ import annotations

import re
from typing import Any

from blog_backend.errors import ValidationError

EMAIL_PATTERN = re.compile(
    r"\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+", re.ASCII
)
PASSWORD_PATTERN = re.compile(
    r"(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).{6,20}", re.ASCII
)
# bcrypt rejects longer input
MAX_PASSWORD_BYTES = 72

MIN_NAME_LENGTH = 3
MAX_DESCRIPTION_LENGTH = 200
MAX_BIO_LENGTH = 200
MAX_TAGS = 10


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(email or ""))


def is_strong_password(password: str) -> bool:
    """6-20 characters with at least one digit, one lowercase and one uppercase."""
    password = password or ""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return bool(PASSWORD_PATTERN.fullmatch(password))


def validate_signup(fullname: str, email: str, password: str) -> None:
    if len(fullname or "") < MIN_NAME_LENGTH:
        raise ValidationError("Full name too short", field="fullname")
    if not is_valid_email(email):
        raise ValidationError("Invalid email", field="email")
    if not is_strong_password(password):
        raise ValidationError("Weak password", field="password")


def _block_count(content: Any) -> int:
    if not isinstance(content, dict):
        return 0
    blocks = content.get("blocks")
    return len(blocks) if isinstance(blocks, list) else 0


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def validate_blog(
    title: Any,
    des: Any,
    banner: Any,
    content: Any,
    tags: Any,
) -> list[str]:
    """
    Check a blog creation payload and return its tags lowercased.
    """
    if not _is_text(title):
        raise ValidationError("Title required", field="title")
    if not _is_text(des) or len(des) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError("Description max 200 chars", field="des")
    if not _is_text(banner):
        raise ValidationError("Banner required", field="banner")
    if _block_count(content) == 0:
        raise ValidationError("Content required", field="content")
    if (
        not isinstance(tags, list)
        or not tags
        or len(tags) > MAX_TAGS
        or not all(isinstance(tag, str) for tag in tags)
    ):
        raise ValidationError("Tags required (max 10)", field="tags")
    return [tag.lower() for tag in tags]


def validate_user_fields(fullname: str, username: str, bio: str = "") -> None:
    """Constraints every stored user record must satisfy."""
    if len(fullname) < MIN_NAME_LENGTH:
        raise ValidationError(
            "fullname must be at least 3 letters long", field="fullname"
        )
    if len(username) < MIN_NAME_LENGTH:
        raise ValidationError(
            "Username must be at least 3 letters long", field="username"
        )
    if len(bio) > MAX_BIO_LENGTH:
        raise ValidationError(
            "Bio should not be more than 200 characters", field="bio"
        )
