"""
HTTP routes for the blogging API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from blog_backend.config import Settings, get_settings
from blog_backend.credentials import hash_password, verify_password
from blog_backend.db import DbClient
from blog_backend.dependencies import get_db_client, get_storage_client
from blog_backend.errors import Conflict, UpstreamError, ValidationError
from blog_backend.formatting import format_user
from blog_backend.identity import derive_blog_slug, derive_username
from blog_backend.schemas import (
    CreateBlogPayload,
    CreateBlogResponse,
    LatestBlogsResponse,
    SigninPayload,
    SignupPayload,
    UploadUrlResponse,
    UserResponse,
)
from blog_backend.storage import StorageClient
from blog_backend.uploads import issue_upload_url
from blog_backend.validation import validate_blog, validate_signup

logger = logging.getLogger(__name__)

router = APIRouter()

INTERNAL_ERROR = "Internal server error"

# Status for request bodies that fail to parse, by endpoint name.
INVALID_BODY_STATUS = {"create_blog": 403}


@router.get("/get-upload-url", response_model=UploadUrlResponse)
def get_upload_url(
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings),
):
    try:
        url = issue_upload_url(storage, expires_in=settings.upload_url_expires_in)
    except UpstreamError:
        logger.exception("Failed to generate upload URL")
        raise HTTPException(status_code=500, detail="Failed to generate upload URL")
    return UploadUrlResponse(uploadURL=url)


@router.post("/signup", response_model=UserResponse, status_code=201)
def signup(payload: SignupPayload, db: DbClient = Depends(get_db_client)):
    try:
        validate_signup(payload.fullname, payload.email, payload.password)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)

    email = payload.email.lower()
    try:
        if db.find_user_by_email(email):
            raise HTTPException(status_code=409, detail="Email already exists")
        user = db.create_user(
            fullname=payload.fullname,
            email=email,
            password=hash_password(payload.password),
            username=derive_username(email, db),
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    except Conflict as exc:
        # The unique index caught what the existence checks missed.
        raise HTTPException(status_code=409, detail=exc.message)
    except UpstreamError:
        logger.exception("Signup failed")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
    logger.info("Registered user %s", user.username)
    return UserResponse(**format_user(user))


@router.post("/signin", response_model=UserResponse)
def signin(payload: SigninPayload, db: DbClient = Depends(get_db_client)):
    try:
        user = db.find_user_by_email(payload.email)
    except UpstreamError:
        logger.exception("Signin failed")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
    if not user:
        raise HTTPException(
            status_code=403, detail="Email not found please enter the valid email"
        )
    if not verify_password(payload.password, user.password):
        raise HTTPException(status_code=403, detail="Incorrect password")
    return UserResponse(**format_user(user))


@router.get("/latest-blogs", response_model=LatestBlogsResponse)
def latest_blogs(
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    try:
        blogs = db.list_latest_published(limit=settings.latest_blogs_limit)
    except UpstreamError:
        logger.exception("Failed to fetch blogs")
        raise HTTPException(status_code=500, detail="Failed to fetch blogs")
    return LatestBlogsResponse(blogs=blogs)


@router.post("/create-blog", response_model=CreateBlogResponse)
def create_blog(payload: CreateBlogPayload, db: DbClient = Depends(get_db_client)):
    try:
        tags = validate_blog(
            payload.title, payload.des, payload.banner, payload.content, payload.tags
        )
    except ValidationError as exc:
        raise HTTPException(status_code=403, detail=exc.message)

    try:
        blog = db.create_blog(
            blog_id=derive_blog_slug(payload.title),
            title=payload.title,
            des=payload.des,
            banner=payload.banner,
            tags=tags,
            content=payload.content,
            draft=bool(payload.draft),
        )
    except (Conflict, UpstreamError):
        logger.exception("Failed to create blog")
        raise HTTPException(status_code=500, detail="Failed to create blog")
    return CreateBlogResponse(id=blog.blog_id)
