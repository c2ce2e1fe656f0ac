"""
Public projections of stored users and blogs.

Functions here accept any object exposing the record attributes, so both the
dataclass records and the SQLAlchemy rows can be passed in.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def format_timestamp(ts: float) -> str:
    """Epoch seconds to an ISO-8601 UTC string with millisecond precision."""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_user(user: Any) -> dict:
    """The only user fields returned by signup and signin."""
    return {
        "profile_img": user.profile_img,
        "username": user.username,
        "fullname": user.fullname,
    }


def format_author(user: Optional[Any]) -> Optional[dict]:
    if user is None:
        return None
    return {"personal_info": format_user(user)}


def format_latest_blog(blog: Any, author: Optional[Any]) -> dict:
    return {
        "blog_id": blog.blog_id,
        "title": blog.title,
        "des": blog.des,
        "tags": list(blog.tags or []),
        "banner": blog.banner,
        "activity": dict(blog.activity or {}),
        "publishedAt": format_timestamp(blog.published_at),
        "author": format_author(author),
    }
