"""
Input structs for every mutating operation.

Each struct lists its required and optional fields with their constraints so a
request is rejected with ``InvalidArgument`` before the store is touched.
"""

import uuid
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator

from vidgraph.errors import InvalidArgument

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_id(value: Any, label: str = "id") -> str:
    """Return the canonical form of an identifier or raise InvalidArgument."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgument(f"{label} is required")
    try:
        return str(uuid.UUID(str(value).strip()))
    except (ValueError, AttributeError):
        raise InvalidArgument(f"Invalid {label} format")


def parse_input(model: Type[ModelT], **data: Any) -> ModelT:
    """Build an input struct, converting validation failures to InvalidArgument."""
    try:
        return model(**data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "input"
        raise InvalidArgument(f"{field}: {first.get('msg', 'invalid value')}")


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class RegisterInput(_Input):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    avatar: str = Field(..., min_length=1, description="URL of the uploaded avatar image")
    cover_image: Optional[str] = None

    @field_validator("username")
    @classmethod
    def lower_username(cls, v: str) -> str:
        return v.lower()

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class LoginInput(_Input):
    email: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def identifier_present(self):
        if not (self.email or self.username):
            raise ValueError("email or username is required")
        return self


class RefreshInput(_Input):
    refresh_token: str = Field(..., min_length=1)


class PasswordChangeInput(_Input):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class AccountUpdateInput(_Input):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class ImageUpdateInput(_Input):
    url: str = Field(..., min_length=1)


class VideoCreateInput(_Input):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    video_file: str = Field(..., min_length=1, description="URL of the uploaded media")
    thumbnail: str = Field(..., min_length=1, description="URL of the uploaded thumbnail")
    duration: float = Field(0.0, ge=0)


class VideoUpdateInput(_Input):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    thumbnail: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def any_field(self):
        if self.title is None and self.description is None and self.thumbnail is None:
            raise ValueError("At least one field is required to update")
        return self


class ContentInput(_Input):
    """Body of a comment or tweet."""
    content: str = Field(..., min_length=1)


class PlaylistCreateInput(_Input):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    is_public: bool = True


class PlaylistUpdateInput(_Input):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_public: Optional[bool] = None

    @model_validator(mode="after")
    def any_field(self):
        if self.name is None and self.description is None and self.is_public is None:
            raise ValueError("At least one field is required to update")
        return self
