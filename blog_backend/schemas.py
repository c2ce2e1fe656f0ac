"""
Pydantic schemas for the blogging API.

Request fields are lenient (defaults instead of required) so that missing
values reach the validation module and get its error messages.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class SignupPayload(BaseModel):
    fullname: str = ""
    email: str = ""
    password: str = ""


class SigninPayload(BaseModel):
    email: str = ""
    password: str = ""


class UserResponse(BaseModel):
    profile_img: str
    username: str
    fullname: str


class UploadUrlResponse(BaseModel):
    uploadURL: str


class CreateBlogPayload(BaseModel):
    # Left untyped; validate_blog checks shapes.
    title: Any = None
    des: Any = None
    banner: Any = None
    tags: Any = None
    content: Any = None
    draft: Any = None


class CreateBlogResponse(BaseModel):
    id: str


class AuthorInfo(BaseModel):
    personal_info: UserResponse


class LatestBlog(BaseModel):
    blog_id: str
    title: str
    des: str
    tags: list[str]
    banner: str
    activity: dict
    publishedAt: str
    author: Optional[AuthorInfo] = None


class LatestBlogsResponse(BaseModel):
    blogs: list[LatestBlog]
