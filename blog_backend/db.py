"""
User and blog directories: a SQLAlchemy-backed implementation and an
in-memory one for development and tests.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    create_engine,
    select,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, joinedload, relationship, sessionmaker

from blog_backend.errors import Conflict, UpstreamError, ValidationError
from blog_backend.formatting import format_latest_blog
from blog_backend.identity import default_profile_img
from blog_backend.validation import validate_user_fields

logger = logging.getLogger(__name__)

SOCIAL_PLATFORMS = ("youtube", "instagram", "facebook", "twitter", "github", "website")


def default_social_links() -> dict:
    return {platform: "" for platform in SOCIAL_PLATFORMS}


def default_account_info() -> dict:
    return {"total_posts": 0, "total_reads": 0}


def default_activity() -> dict:
    return {
        "total_likes": 0,
        "total_comments": 0,
        "total_reads": 0,
        "total_parent_comments": 0,
    }


class UserDirectory(Protocol):
    """Create and look up user records."""

    def create_user(
        self,
        *,
        fullname: str,
        email: str,
        password: str,
        username: str,
        profile_img: Optional[str] = None,
        bio: str = "",
    ) -> "UserRecord":
        ...

    def find_user_by_email(self, email: str) -> Optional["UserRecord"]:
        ...

    def username_exists(self, username: str) -> bool:
        ...


class BlogDirectory(Protocol):
    """Create blogs and list the latest published ones."""

    def create_blog(
        self,
        *,
        blog_id: str,
        title: str,
        des: str,
        banner: str,
        tags: list[str],
        content: dict,
        draft: bool = False,
        author_id: Optional[str] = None,
    ) -> "BlogRecord":
        ...

    def list_latest_published(self, limit: int = 5) -> list[dict]:
        ...


class DbClient(UserDirectory, BlogDirectory, Protocol):
    """Both directories behind one connection."""


@dataclass
class UserRecord:
    user_id: str
    fullname: str
    email: str
    password: str
    username: str
    profile_img: str
    bio: str = ""
    social_links: dict = field(default_factory=default_social_links)
    account_info: dict = field(default_factory=default_account_info)
    google_auth: bool = False
    blogs: list[str] = field(default_factory=list)
    joined_at: float = field(default_factory=lambda: time.time())


@dataclass
class BlogRecord:
    blog_id: str
    title: str
    des: str
    banner: str
    tags: list[str]
    content: dict
    draft: bool = False
    author_id: Optional[str] = None
    activity: dict = field(default_factory=default_activity)
    published_at: float = field(default_factory=lambda: time.time())


def _normalize_user(fullname: str, email: str, username: str, bio: str) -> tuple[str, str]:
    fullname = fullname.lower()
    validate_user_fields(fullname, username, bio)
    return fullname, email.lower()


class InMemoryDbClient:
    """Simple in-memory directory for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.blogs: Dict[str, BlogRecord] = {}
        self._lock = threading.Lock()

    def create_user(
        self,
        *,
        fullname: str,
        email: str,
        password: str,
        username: str,
        profile_img: Optional[str] = None,
        bio: str = "",
    ) -> UserRecord:
        fullname, email = _normalize_user(fullname, email, username, bio)
        with self._lock:
            if self._find_user(email=email):
                raise Conflict("Email already exists")
            if self._find_user(username=username):
                raise Conflict("Username already exists")
            record = UserRecord(
                user_id=uuid.uuid4().hex,
                fullname=fullname,
                email=email,
                password=password,
                username=username,
                profile_img=profile_img or default_profile_img(),
                bio=bio,
            )
            self.users[record.user_id] = record
            return record

    def _find_user(
        self, *, email: Optional[str] = None, username: Optional[str] = None
    ) -> Optional[UserRecord]:
        # Callers hold self._lock.
        for user in self.users.values():
            if email is not None and user.email == email:
                return user
            if username is not None and user.username == username:
                return user
        return None

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            return self._find_user(email=(email or "").lower())

    def username_exists(self, username: str) -> bool:
        with self._lock:
            return self._find_user(username=username) is not None

    def create_blog(
        self,
        *,
        blog_id: str,
        title: str,
        des: str,
        banner: str,
        tags: list[str],
        content: dict,
        draft: bool = False,
        author_id: Optional[str] = None,
    ) -> BlogRecord:
        with self._lock:
            if blog_id in self.blogs:
                raise Conflict("Blog id already exists")
            author = None
            if author_id is not None:
                author = self.users.get(author_id)
                if author is None:
                    raise ValidationError("Unknown author", field="author")
            record = BlogRecord(
                blog_id=blog_id,
                title=title,
                des=des,
                banner=banner,
                tags=list(tags),
                content=content,
                draft=draft,
                author_id=author_id,
            )
            self.blogs[blog_id] = record
            if author is not None:
                author.blogs.append(blog_id)
            return record

    def list_latest_published(self, limit: int = 5) -> list[dict]:
        with self._lock:
            # dicts keep insertion order, so the index breaks timestamp ties
            published = [
                (blog.published_at, index, blog)
                for index, blog in enumerate(self.blogs.values())
                if not blog.draft
            ]
            published.sort(key=lambda item: (item[0], item[1]), reverse=True)
            return [
                format_latest_blog(blog, self.users.get(blog.author_id))
                for _, _, blog in published[:limit]
            ]

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.users.clear()
            self.blogs.clear()


class SqlDbClient:
    """
    SQLAlchemy-backed directory. Accepts any SQLAlchemy URL (e.g., Postgres,
    or SQLite for tests). Unique indexes on email, username and blog_id
    settle races between the existence checks and the inserts.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        try:
            self.engine = create_engine(
                database_url,
                future=True,
                pool_pre_ping=True,
                pool_recycle=1800,
            )
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise UpstreamError("Could not connect to the directory database") from exc
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            raise UpstreamError(f"Database error while {action}") from exc

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            user_id=row.user_id,
            fullname=row.fullname,
            email=row.email,
            password=row.password,
            username=row.username,
            profile_img=row.profile_img,
            bio=row.bio,
            social_links=dict(row.social_links or {}),
            account_info=dict(row.account_info or {}),
            google_auth=row.google_auth,
            blogs=[blog.blog_id for blog in row.blogs],
            joined_at=row.joined_at,
        )

    def _to_blog_record(self, row: "BlogRow") -> BlogRecord:
        return BlogRecord(
            blog_id=row.blog_id,
            title=row.title,
            des=row.des,
            banner=row.banner,
            tags=list(row.tags or []),
            content=row.content,
            draft=row.draft,
            author_id=row.author_id,
            activity=dict(row.activity or {}),
            published_at=row.published_at,
        )

    def create_user(
        self,
        *,
        fullname: str,
        email: str,
        password: str,
        username: str,
        profile_img: Optional[str] = None,
        bio: str = "",
    ) -> UserRecord:
        fullname, email = _normalize_user(fullname, email, username, bio)
        row = UserRow(
            user_id=uuid.uuid4().hex,
            fullname=fullname,
            email=email,
            password=password,
            username=username,
            bio=bio,
            profile_img=profile_img or default_profile_img(),
            social_links=default_social_links(),
            account_info=default_account_info(),
            google_auth=False,
            joined_at=time.time(),
        )
        try:
            with self._session("creating user") as session:
                session.add(row)
                session.commit()
                return self._to_user_record(row)
        except IntegrityError as exc:
            logger.info("Unique index rejected user %s", username)
            if self.find_user_by_email(email):
                raise Conflict("Email already exists") from exc
            raise Conflict("Username already exists") from exc

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._session("looking up user") as session:
            stmt = select(UserRow).where(UserRow.email == (email or "").lower())
            row = session.execute(stmt).scalar_one_or_none()
            if not row:
                return None
            return self._to_user_record(row)

    def username_exists(self, username: str) -> bool:
        with self._session("checking username") as session:
            stmt = select(UserRow.user_id).where(UserRow.username == username)
            return session.execute(stmt).first() is not None

    def create_blog(
        self,
        *,
        blog_id: str,
        title: str,
        des: str,
        banner: str,
        tags: list[str],
        content: dict,
        draft: bool = False,
        author_id: Optional[str] = None,
    ) -> BlogRecord:
        try:
            with self._session("creating blog") as session:
                if author_id is not None and session.get(UserRow, author_id) is None:
                    raise ValidationError("Unknown author", field="author")
                row = BlogRow(
                    blog_id=blog_id,
                    title=title,
                    des=des,
                    banner=banner,
                    tags=list(tags),
                    content=content,
                    draft=draft,
                    author_id=author_id,
                    activity=default_activity(),
                    published_at=time.time(),
                )
                session.add(row)
                session.commit()
                return self._to_blog_record(row)
        except IntegrityError as exc:
            raise Conflict("Blog id already exists") from exc

    def list_latest_published(self, limit: int = 5) -> list[dict]:
        with self._session("listing blogs") as session:
            stmt = (
                select(BlogRow)
                .options(joinedload(BlogRow.author))
                .where(BlogRow.draft.is_(False))
                .order_by(BlogRow.published_at.desc(), BlogRow.id.desc())
                .limit(limit)
            )
            rows = session.execute(stmt).scalars().all()
            return [format_latest_blog(row, row.author) for row in rows]


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
        Index("ix_users_username", "username", unique=True),
    )

    user_id = Column(String, primary_key=True)
    fullname = Column(String, nullable=False)
    email = Column(String, nullable=False)
    password = Column(String, nullable=False)
    username = Column(String, nullable=False)
    bio = Column(String, nullable=False, default="")
    profile_img = Column(String, nullable=False)
    social_links = Column(JSON, nullable=False)
    account_info = Column(JSON, nullable=False)
    google_auth = Column(Boolean, nullable=False, default=False)
    joined_at = Column(Float, nullable=False)

    blogs = relationship("BlogRow", back_populates="author")


class BlogRow(Base):
    __tablename__ = "blogs"
    __table_args__ = (Index("ix_blogs_blog_id", "blog_id", unique=True),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    blog_id = Column(String, nullable=False)
    title = Column(String, nullable=False)
    des = Column(String(200), nullable=False)
    banner = Column(String, nullable=False)
    tags = Column(JSON, nullable=False)
    content = Column(JSON, nullable=False)
    draft = Column(Boolean, nullable=False, default=False, index=True)
    author_id = Column(String, ForeignKey("users.user_id"), nullable=True, index=True)
    activity = Column(JSON, nullable=False)
    published_at = Column(Float, nullable=False, index=True)

    author = relationship("UserRow", back_populates="blogs")
