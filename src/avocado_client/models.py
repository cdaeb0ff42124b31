"""
Avocado API Models

Pydantic models for users, couples, activities and lists.
The API speaks camelCase JSON; fields are snake_case with camelCase aliases.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue
from pydantic.alias_generators import to_camel


class ResponseShape(Enum):
    """How a response body is decoded."""

    OBJECT = "object"  # bare JSON object
    FIRST = "first"  # first element of a JSON array
    ARRAY = "array"  # whole JSON array
    STATUS = "status"  # body ignored, True on HTTP 200


class ActivityType(str, Enum):
    """Activity feed entry types."""

    MESSAGE = "message"
    KISS = "kiss"
    HUG = "hug"
    LIST = "list"
    PHOTO = "photo"
    MEDIA = "media"
    ACTIVITY = "activity"
    COUPLE = "couple"
    USER = "user"


class AvocadoModel(BaseModel):
    """Base for API records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",  # Ignore extra fields from API responses
    )


class AvatarImageUrls(AvocadoModel):
    """Avatar image renditions."""

    small: str | None = None
    medium: str | None = None
    large: str | None = None


class UserOptions(AvocadoModel):
    """Per-user app preferences. Keys vary between accounts, so unknown ones are kept."""

    model_config = ConfigDict(extra="allow")


class User(AvocadoModel):
    """An Avocado user."""

    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    create_time: int | None = Field(default=None, description="Milliseconds since epoch")
    birthday: int | None = Field(default=None, description="Milliseconds since epoch")
    last_read_time: int | None = None
    current_couple_id: str | None = None
    avatar_url: str | None = None
    avatar_image_urls: AvatarImageUrls | None = None
    verified: bool = False
    deleted: bool = False
    options: UserOptions | None = None

    # Opaque blobs passed through as raw JSON; the API does not document them
    google_calendar_access_token: JsonValue = None
    google_calendar_refresh_token: JsonValue = None
    google_calendar_push_info: JsonValue = None
    google_info: JsonValue = None
    oldest_valid_cookie: JsonValue = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Couple(AvocadoModel):
    """The paired couple, as seen from the logged-in user."""

    id: str
    create_time: int | None = None
    current_user: User
    other_user: User


class Activity(AvocadoModel):
    """A feed entry (message, kiss, hug, list change, photo, ...)."""

    id: str
    type: str
    time_created: int | None = None
    time_updated: int | None = None
    user_id: str | None = None
    data: JsonValue = Field(default=None, description="Type-specific payload")

    @property
    def activity_type(self) -> ActivityType | None:
        """The entry type as an ActivityType, or None if the API sent an unknown one."""
        try:
            return ActivityType(self.type)
        except ValueError:
            return None


class ListItem(AvocadoModel):
    """A single entry in a shared list."""

    id: str
    text: str = ""
    complete: bool = False
    create_time: int | None = None
    edit_time: int | None = None
    user_id: str | None = None
    deleted: bool = False


class AvocadoList(AvocadoModel):
    """A shared list."""

    id: str
    name: str = ""
    create_time: int | None = None
    update_time: int | None = None
    user_id: str | None = None
    deleted: bool = False
    items: list[ListItem] = Field(default_factory=list)

    def open_items(self) -> list[ListItem]:
        """Items that are neither completed nor deleted."""
        return [item for item in self.items if not item.complete and not item.deleted]


def dump_records(records: Any) -> Any:
    """Convert a record or list of records to JSON-ready data."""
    if isinstance(records, BaseModel):
        return records.model_dump(mode="json")
    if isinstance(records, list):
        return [dump_records(record) for record in records]
    return records
