"""Schemas for the signed-in user's own profile and store views."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from backend.models.user import UserRole
from backend.schemas.auth import check_email_length, check_name, check_password, strip_or_none


class ProfileUpdate(BaseModel):
    """Profile update request schema. Omitted fields are left unchanged."""

    name: str | None = None
    email: EmailStr | None = None
    address: str | None = Field(default=None, max_length=400)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        return strip_or_none(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return check_name(v) if v is not None else v

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str | None) -> str | None:
        return check_email_length(v) if v is not None else v

    @field_validator("address", mode="before")
    @classmethod
    def normalize_address(cls, v: str | None) -> str | None:
        return strip_or_none(v)


class PasswordChange(BaseModel):
    """Password change request schema."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password(v)

    @model_validator(mode="after")
    def check_passwords_differ(self) -> "PasswordChange":
        if self.current_password == self.new_password:
            raise ValueError("New password must be different from current password")
        return self


class ProfileResponseUser(BaseModel):
    id: int
    name: str
    email: str
    address: str | None
    role: UserRole
    created_at: str
    total_ratings_given: int


class ProfileData(BaseModel):
    user: ProfileResponseUser


class ProfileResponse(BaseModel):
    success: bool = True
    data: ProfileData


class StoreDetail(BaseModel):
    id: int
    name: str
    address: str
    average_rating: float
    total_ratings: int


class OwnRating(BaseModel):
    id: int
    rating: int
    review: str | None
    created_at: str
    updated_at: str


class RecentRating(BaseModel):
    rating: int
    review: str | None
    created_at: str
    user_name: str


class StoreDetailData(BaseModel):
    store: StoreDetail
    userRating: OwnRating | None
    recentRatings: list[RecentRating]


class StoreDetailResponse(BaseModel):
    success: bool = True
    data: StoreDetailData
