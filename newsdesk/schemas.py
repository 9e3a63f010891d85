import re
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from newsdesk.config import settings
from newsdesk.models import Category, Role

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
_URL_RE = re.compile(r"^https?://\S+$")

MIN_PASSWORD_LENGTH = 6

# Ids and offsets must fit the 32-bit INTEGER columns.
MAX_INT = 2**31 - 1

RecordId = Annotated[int, Field(ge=1, le=MAX_INT)]
TagName = Annotated[str, Field(max_length=100)]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def _email(value: str) -> str:
    value = value.strip().lower()
    if not _EMAIL_RE.match(value):
        raise ValueError("Please provide a valid email")
    return value


def _password(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return value


class CamelModel(BaseModel):
    """Accepts and emits camelCase names (``firstName``, ``readTime``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Query arguments ---

class NoArgs(CamelModel):
    pass


class ArticlesArgs(CamelModel):
    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1)
    skip: int = Field(0, ge=0, le=MAX_INT)
    category: Optional[Category] = None
    is_featured: Optional[bool] = None


class IdArgs(CamelModel):
    id: RecordId


class CommentsArgs(CamelModel):
    article_id: RecordId


class SearchArgs(CamelModel):
    query: Optional[str] = None


# --- Account arguments ---

class RegisterArgs(CamelModel):
    first_name: Annotated[str, AfterValidator(_required_text)]
    last_name: Annotated[str, AfterValidator(_required_text)]
    email: Annotated[str, AfterValidator(_email)]
    password: Annotated[str, AfterValidator(_password)]


class LoginArgs(CamelModel):
    email: str
    password: str


class UserUpdate(CamelModel):
    """
    Profile edit payload.  Only keys present in the request are applied,
    so callers read it with ``model_dump(exclude_unset=True)``.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None

    @field_validator("first_name", "last_name", "email")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        if info.field_name == "email":
            return _email(value)
        return _required_text(value)


class UpdateProfileArgs(CamelModel):
    input: UserUpdate


class ChangePasswordArgs(CamelModel):
    current_password: str
    new_password: Annotated[str, AfterValidator(_password)]


class UpdateAvatarArgs(CamelModel):
    avatar_url: Optional[str] = None

    @field_validator("avatar_url")
    @classmethod
    def _url_or_reset(cls, value):
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not _URL_RE.match(value):
            raise ValueError("Avatar must be an http(s) URL")
        return value


class DeleteAccountArgs(CamelModel):
    password: str


# --- Article arguments ---

class ArticleCreate(CamelModel):
    title: str = Field(min_length=5, max_length=300)
    excerpt: str = Field(min_length=20, max_length=200)
    content: Annotated[str, AfterValidator(_required_text)]
    category: Category
    author: Optional[str] = None
    featured_image: Optional[str] = None
    tags: list[TagName] = []
    read_time: Optional[int] = Field(None, ge=1)
    is_featured: bool = False
    is_published: bool = True

    @field_validator("title", "excerpt", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class ArticleUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=5, max_length=300)
    excerpt: Optional[str] = Field(None, min_length=20, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[Category] = None
    author: Optional[str] = None
    featured_image: Optional[str] = None
    tags: Optional[list[TagName]] = None
    read_time: Optional[int] = Field(None, ge=1)
    is_featured: Optional[bool] = None
    is_published: Optional[bool] = None

    @field_validator("title", "excerpt", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class UpdateArticleArgs(CamelModel):
    id: RecordId
    input: ArticleUpdate


# --- Comment arguments ---

class AddCommentArgs(CamelModel):
    article_id: RecordId
    content: Annotated[str, AfterValidator(_required_text)]


class UpdateCommentArgs(CamelModel):
    id: RecordId
    content: Annotated[str, AfterValidator(_required_text)]


# --- Responses ---

class ArticleResponse(CamelModel):
    id: int
    title: str
    excerpt: str
    content: str
    category: Category
    author: str
    featured_image: str
    tags: list[str]
    views: int
    read_time: int
    is_featured: bool
    is_published: bool
    published_at: UtcDatetime
    created_at: UtcDatetime
    updated_at: UtcDatetime
    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def _tag_names(cls, value):
        # Article.tags is an association proxy over the ordered tag rows.
        return list(value)


class UserResponse(CamelModel):
    """Public account fields; the password hash is never part of it."""

    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    # Stored custom or generated avatar; None after a reset, in which case
    # clients fall back to gravatar_url.
    avatar: Optional[str] = None
    gravatar_url: str
    bio: Optional[str] = None
    website: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    role: Role
    email_verified: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime
    last_login: Optional[UtcDatetime] = None


class AuthorResponse(CamelModel):
    """What other readers see of a comment's author."""

    id: int
    first_name: str
    last_name: str
    full_name: str
    avatar: Optional[str] = None
    gravatar_url: str
    role: Role
    created_at: UtcDatetime


class CommentResponse(CamelModel):
    id: int
    article_id: int
    user_id: int
    content: str
    created_at: UtcDatetime
    updated_at: UtcDatetime
    # None once the author's account has been deleted.
    user: Optional[AuthorResponse] = None


class AuthPayload(CamelModel):
    token: str
    user: UserResponse


class MutationResult(CamelModel):
    success: bool
    message: str
    user: Optional[UserResponse] = None


# --- Transport ---

class OperationRequest(BaseModel):
    operation: str
    # null and {} both mean "no arguments"
    arguments: Optional[dict] = None
