from typing import Any, Generic, Mapping, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from community_api.config import settings
from community_api.exceptions import ErrorKind

T = TypeVar("T")


def _lookup_id(value: Any) -> Any:
    # Lookup columns come back either as the raw id or as {"Id": ..., "Name": ...}
    if isinstance(value, Mapping):
        return value.get("Id")
    return value


class DomainModel(BaseModel):
    """snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


# --- Comment ---

class Comment(DomainModel):
    record_id: int = Field(alias="Id")
    content: str = ""
    post_id: int | None = None
    author_id: int | None = None
    author_name: str | None = None
    upvotes: int = 0
    downvotes: int = 0
    created_on: str | None = None
    # Only populated by the in-memory store
    parent_id: int | None = None
    score: int = 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Comment":
        return cls(
            record_id=record["Id"],
            content=record.get("content_c") or "",
            post_id=_lookup_id(record.get("post_c")),
            author_id=_lookup_id(record.get("author_c")),
            author_name=record.get("authorName_c"),
            upvotes=record.get("upvotes_c") or 0,
            downvotes=record.get("downvotes_c") or 0,
            created_on=record.get("CreatedOn"),
        )


class CommentCreate(DomainModel):
    content: str
    post_id: int
    author_id: int | None = None
    author_name: str | None = None
    parent_id: int | None = None


class CommentUpdate(DomainModel):
    content: str | None = None
    upvotes: int | None = None
    downvotes: int | None = None


class VoteRequest(DomainModel):
    vote_type: str


# --- Community ---

class Community(DomainModel):
    record_id: int = Field(alias="Id")
    name: str | None = None
    description: str | None = None
    member_count: int = 0
    color: str = settings.DEFAULT_COMMUNITY_COLOR
    category: str | None = None
    post_count: int = 0

    @computed_field
    @property
    def id(self) -> str:
        return f"community_{self.record_id}"

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Community":
        return cls(
            record_id=record["Id"],
            name=record.get("name_c"),
            description=record.get("description_c"),
            member_count=record.get("member_count_c") or 0,
            color=record.get("color_c") or settings.DEFAULT_COMMUNITY_COLOR,
            category=record.get("category_c"),
            post_count=record.get("post_count_c") or 0,
        )


class CommunityCreate(DomainModel):
    name: str
    description: str | None = None
    member_count: int | None = None
    color: str | None = None
    category: str | None = None


class CommunityUpdate(DomainModel):
    """Every field is optional; only fields explicitly set are sent."""

    name: str | None = None
    description: str | None = None
    member_count: int | None = None
    color: str | None = None
    category: str | None = None
    post_count: int | None = None


class CommunitySearchResult(BaseModel):
    community: Community
    snippet: str = ""


# --- User ---

class User(DomainModel):
    record_id: int = Field(alias="Id")
    name: str | None = Field(None, alias="Name")
    email: str | None = None
    bio: str = ""
    avatar: str = ""
    karma: int = 0
    created_at: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "User":
        return cls(
            record_id=record["Id"],
            name=record.get("Name"),
            email=record.get("email_c"),
            bio=record.get("bio_c") or "",
            avatar=record.get("avatar_c") or "",
            karma=record.get("karma_c") or 0,
            created_at=record.get("created_at_c"),
        )


class UserWrite(BaseModel):
    """
    Accepts platform column names or bare domain names for each writable
    field (``email_c`` or ``email``); the platform name wins when both are
    present.
    """

    name: str | None = Field(None, validation_alias=AliasChoices("Name", "name"))
    email: str | None = Field(None, validation_alias=AliasChoices("email_c", "email"))
    bio: str | None = Field(None, validation_alias=AliasChoices("bio_c", "bio"))
    avatar: str | None = Field(None, validation_alias=AliasChoices("avatar_c", "avatar"))


class UserCreate(UserWrite):
    pass


class UserUpdate(UserWrite):
    pass


# --- Service results ---

class ServiceResult(BaseModel, Generic[T]):
    """
    Outcome of a service call.

    ``value`` always holds something the caller can use directly: the
    result on success, or the operation's sentinel (``None``, ``False`` or
    ``[]``) on failure.  Whether and how to notify the user is left to the
    caller (see ``community_api.notifications``).
    """

    value: T
    error: ErrorKind | None = None
    messages: list[str] = []
    success_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def succeeded(cls, value: Any, success_message: str | None = None) -> "ServiceResult":
        return cls(value=value, success_message=success_message)

    @classmethod
    def failed(cls, sentinel: Any, error: ErrorKind, messages: list[str]) -> "ServiceResult":
        return cls(value=sentinel, error=error, messages=messages)
