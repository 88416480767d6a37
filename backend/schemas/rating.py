"""Rating schemas."""

from pydantic import BaseModel, Field, field_validator

from backend.schemas.auth import strip_or_none


class RatingSubmit(BaseModel):
    """Rating submission request schema."""

    rating: int = Field(ge=1, le=5)
    review: str | None = Field(default=None, max_length=500)

    @field_validator("review", mode="before")
    @classmethod
    def normalize_review(cls, v: str | None) -> str | None:
        """Normalize review by stripping whitespace."""
        return strip_or_none(v)


class OwnerRatingResponse(BaseModel):
    """A rating on one of the caller's stores, with the rater and the store."""

    id: int
    rating: int
    review: str | None
    created_at: str
    updated_at: str
    user_id: int
    user_name: str
    user_email: str
    user_address: str | None
    store_id: int
    store_name: str


class OwnerRatingsData(BaseModel):
    ratings: list[OwnerRatingResponse]
    total: int


class OwnerRatingsResponse(BaseModel):
    success: bool = True
    data: OwnerRatingsData


class UserRatingResponse(BaseModel):
    """A rating the caller gave, with the rated store."""

    id: int
    rating: int
    review: str | None
    created_at: str
    updated_at: str
    store_id: int
    store_name: str
    store_address: str


class UserRatingsData(BaseModel):
    ratings: list[UserRatingResponse]
    total: int


class UserRatingsResponse(BaseModel):
    success: bool = True
    data: UserRatingsData


class MessageResponse(BaseModel):
    success: bool = True
    message: str
