"""Request/response models for users, contacts and auth."""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

_SPECIAL_CHARS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')
_PHONE_SEPARATORS = re.compile(r"[\s\-().]")
_E164 = re.compile(r"^\+[1-9]\d{7,14}$")
_HTTP_URL = TypeAdapter(HttpUrl)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _normalize_email(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


def _check_password(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if len(v) > 255:
        raise ValueError("Password must not exceed 255 characters")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", v):
        raise ValueError("Password must contain at least one number")
    if not _SPECIAL_CHARS.search(v):
        raise ValueError("Password must contain at least one special character")
    return v


def _check_name(v: str, label: str) -> str:
    v = v.strip()
    if len(v) < 2:
        raise ValueError(f"{label} must be at least 2 characters")
    if len(v) > 100:
        raise ValueError(f"{label} must not exceed 100 characters")
    return v


def normalize_phone(v: Optional[str]) -> Optional[str]:
    """Blank -> None, otherwise ``+<digits>`` with separators removed."""
    if v is None or not str(v).strip():
        return None
    compact = _PHONE_SEPARATORS.sub("", str(v))
    if compact.startswith("00"):
        compact = "+" + compact[2:]
    if not _E164.match(compact):
        raise ValueError("Invalid phone number (include the international prefix)")
    return compact


def _check_image_url(v: Optional[str]) -> Optional[str]:
    """Must parse as an http(s) URL; the client's spelling is what gets stored."""
    if v is None:
        return None
    v = v.strip()
    try:
        _HTTP_URL.validate_python(v)
    except ValidationError:
        raise ValueError("Invalid image URL")
    return v


def _check_country(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if len(v) != 2 or not v.isalpha():
        raise ValueError("Country code must be ISO 3166-1 alpha-2 (2 characters)")
    return v.upper()


class UserCreate(CamelModel):
    email: EmailStr
    password: str
    name: str
    surnames: str
    phone: Optional[str] = None
    country: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return _check_password(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v, "Name")

    @field_validator("surnames")
    @classmethod
    def validate_surnames(cls, v):
        return _check_name(v, "Surnames")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)

    @field_validator("country")
    @classmethod
    def validate_country(cls, v):
        return _check_country(v)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v):
        return _check_image_url(v)


class UserUpdate(CamelModel):
    """Partial profile update. Only fields present in the body are written."""

    email: Optional[EmailStr] = None
    password: Optional[str] = None
    name: Optional[str] = None
    surnames: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return None if v is None else _check_password(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return None if v is None else _check_name(v, "Name")

    @field_validator("surnames")
    @classmethod
    def validate_surnames(cls, v):
        return None if v is None else _check_name(v, "Surnames")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)

    @field_validator("country")
    @classmethod
    def validate_country(cls, v):
        return _check_country(v)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v):
        return _check_image_url(v)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AddContact(CamelModel):
    contact_id: int = Field(gt=0)


class UserPublic(CamelModel):
    id: int
    email: str
    name: str
    surnames: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ContactResponse(CamelModel):
    id: int
    email: str
    name: str
    surnames: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    image_url: Optional[str] = None


class PageMeta(CamelModel):
    total: int
    total_pages: int
    page: int
    limit: int
    next_page: Optional[int] = None
    prev_page: Optional[int] = None


class UserPage(CamelModel):
    meta: PageMeta
    data: List[UserPublic]
