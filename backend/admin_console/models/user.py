"""Marketplace user account as seen by the moderation console."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, ValidationInfo, field_validator

from admin_console.models.base import Entity, decode_status


class UserRole(str, Enum):
    WORKER = "worker"
    EMPLOYER = "employer"
    ADMIN = "admin"
    UNKNOWN = "unknown"


class UserStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    UNKNOWN = "unknown"


class RatingBucket(str, Enum):
    HIGH = "high"          # >= 4
    MEDIUM = "medium"      # [2, 4)
    LOW = "low"            # (0, 2)
    UNRATED = "unrated"    # 0 or absent


USER_STATUS_COLORS = {
    UserStatus.PENDING: "orange",
    UserStatus.ACTIVE: "green",
    UserStatus.SUSPENDED: "red",
}


def rating_bucket(rating: float | None) -> RatingBucket:
    if not rating or rating <= 0:
        return RatingBucket.UNRATED
    if rating >= 4:
        return RatingBucket.HIGH
    if rating >= 2:
        return RatingBucket.MEDIUM
    return RatingBucket.LOW


class User(Entity):
    # Role and status come first so validators below can see them in info.data
    role: UserRole = Field(default=UserRole.UNKNOWN, validation_alias=AliasChoices("type", "role"))
    status: UserStatus = UserStatus.UNKNOWN
    rating: float = 0.0

    name: str = Field(default="", validation_alias=AliasChoices("name", "fullName"))
    email: str | None = None
    phone: str | None = Field(default=None, validation_alias=AliasChoices("phone", "phoneNumber"))
    district: str | None = None
    city: str | None = None
    address: str | None = None

    # Role-specific attributes, owned by the registration flow
    skills: list[str] = Field(default_factory=list)
    availability: list[str] = Field(default_factory=list)
    company: str | None = None
    nid_number: str | None = Field(default=None, validation_alias=AliasChoices("nidNumber", "nid_number"))
    nid_front: str | None = Field(default=None, validation_alias=AliasChoices("nidFront", "nid_front"))
    nid_back: str | None = Field(default=None, validation_alias=AliasChoices("nidBack", "nid_back"))
    profile_photo: str | None = Field(default=None, validation_alias=AliasChoices("profilePhoto", "profile_photo"))
    total_jobs: int | None = Field(default=None, validation_alias=AliasChoices("totalJobs", "total_jobs"))
    completed_jobs: int | None = Field(default=None, validation_alias=AliasChoices("completedJobs", "completed_jobs"))

    @field_validator("role", mode="before")
    @classmethod
    def _decode_role(cls, value: Any, info: ValidationInfo) -> UserRole:
        return decode_status(UserRole, value, info.data.get("id")) or UserRole.UNKNOWN

    @field_validator("status", mode="before")
    @classmethod
    def _decode_status(cls, value: Any, info: ValidationInfo) -> UserStatus:
        return decode_status(UserStatus, value, info.data.get("id")) or UserStatus.UNKNOWN

    @field_validator("rating", mode="before")
    @classmethod
    def _default_rating(cls, value: Any) -> Any:
        if value is None or value == "":
            return 0.0
        return value

    @field_validator("rating", mode="after")
    @classmethod
    def _non_negative_rating(cls, value: float) -> float:
        return max(0.0, value)

    @field_validator("skills", "availability", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.id

    @property
    def rating_bucket(self) -> RatingBucket:
        return rating_bucket(self.rating)

    @property
    def status_color(self) -> str:
        return USER_STATUS_COLORS.get(self.status, "gray")
