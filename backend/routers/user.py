"""User router: profile management, store browsing and rating submission."""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.core.dependencies import get_current_user, require_role
from backend.core.errors import BadRequestError, NotFoundError
from backend.core.ratings import round_rating, store_stat_columns
from backend.core.security import hash_password, verify_password
from backend.database import get_db
from backend.models.rating import Rating
from backend.models.store import Store
from backend.models.user import User, UserRole
from backend.schemas.rating import (
    MessageResponse,
    RatingSubmit,
    UserRatingResponse,
    UserRatingsData,
    UserRatingsResponse,
)
from backend.schemas.store import StoreListResponse, StoreSummary
from backend.schemas.user import (
    OwnRating,
    PasswordChange,
    ProfileData,
    ProfileResponse,
    ProfileResponseUser,
    ProfileUpdate,
    RecentRating,
    StoreDetail,
    StoreDetailData,
    StoreDetailResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/user",
    tags=["user"],
    dependencies=[Depends(require_role(UserRole.NORMAL_USER))],
)

RECENT_RATINGS_LIMIT = 10


@router.get("/profile", response_model=ProfileResponse, status_code=status.HTTP_200_OK)
def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProfileResponse:
    """Return the caller's profile with the number of ratings they have given."""
    total_ratings_given = (
        db.query(func.count(Rating.id)).filter(Rating.user_id == current_user.id).scalar()
    )

    return ProfileResponse(
        data=ProfileData(
            user=ProfileResponseUser(
                id=current_user.id,
                name=current_user.name,
                email=current_user.email,
                address=current_user.address,
                role=current_user.role,
                created_at=current_user.created_at.isoformat(),
                total_ratings_given=total_ratings_given or 0,
            )
        )
    )


@router.put("/profile", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def update_profile(
    profile_data: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Update the caller's name, email and/or address.

    Raises:
        BadRequestError: If the email belongs to another user or nothing was sent
    """
    updates = profile_data.model_dump(exclude_unset=True)
    updates = {field: value for field, value in updates.items() if field == "address" or value}

    if not updates:
        raise BadRequestError("No fields to update")

    email = updates.get("email")
    if email and email != current_user.email:
        email_taken = (
            db.query(User).filter(User.email == email, User.id != current_user.id).first()
        )
        if email_taken:
            raise BadRequestError("Email is already in use by another user")

    for field, value in updates.items():
        setattr(current_user, field, value)
    db.commit()

    logger.info(f"Updated profile fields {sorted(updates)} for user {current_user.id}")

    return MessageResponse(message="Profile updated successfully")


@router.put("/change-password", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def change_password(
    password_data: PasswordChange,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Replace the caller's password after checking the current one.

    Raises:
        BadRequestError: If the current password is wrong
    """
    if not verify_password(password_data.current_password, current_user.password):
        logger.warning(f"Password change with wrong current password for user {current_user.id}")
        raise BadRequestError("Current password is incorrect")

    current_user.password = hash_password(password_data.new_password)
    db.commit()

    return MessageResponse(message="Password updated successfully")


@router.get("/stores", response_model=StoreListResponse, status_code=status.HTTP_200_OK)
def list_stores(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StoreListResponse:
    """List every store by name with its rating statistics and the caller's own rating."""
    rows = (
        db.query(Store.id, Store.name, Store.address, *store_stat_columns())
        .outerjoin(Rating, Rating.store_id == Store.id)
        .group_by(Store.id)
        .order_by(Store.name.asc())
        .all()
    )

    own_ratings = {
        rating.store_id: rating
        for rating in db.query(Rating).filter(Rating.user_id == current_user.id).all()
    }

    stores = []
    for row in rows:
        own = own_ratings.get(row.id)
        stores.append(
            StoreSummary(
                id=row.id,
                name=row.name,
                address=row.address,
                average_rating=round_rating(row.average_rating),
                total_ratings=row.total_ratings,
                user_rating=own.rating if own else None,
                user_rating_id=own.id if own else None,
                user_rating_date=own.created_at.isoformat() if own else None,
            )
        )

    return StoreListResponse(stores=stores)


@router.get("/stores/{store_id}", response_model=StoreDetailResponse, status_code=status.HTTP_200_OK)
def get_store(
    store_id: Annotated[int, Path(ge=1)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StoreDetailResponse:
    """Return one store with its statistics, the caller's rating and recent ratings by others.

    Raises:
        NotFoundError: If the store does not exist
    """
    row = (
        db.query(Store.id, Store.name, Store.address, *store_stat_columns())
        .outerjoin(Rating, Rating.store_id == Store.id)
        .filter(Store.id == store_id)
        .group_by(Store.id)
        .first()
    )
    if row is None:
        raise NotFoundError("Store not found")

    own = (
        db.query(Rating)
        .filter(Rating.store_id == store_id, Rating.user_id == current_user.id)
        .first()
    )

    recent = (
        db.query(Rating.rating, Rating.review, Rating.created_at, User.name.label("user_name"))
        .join(User, Rating.user_id == User.id)
        .filter(Rating.store_id == store_id, Rating.user_id != current_user.id)
        .order_by(Rating.created_at.desc())
        .limit(RECENT_RATINGS_LIMIT)
        .all()
    )

    return StoreDetailResponse(
        data=StoreDetailData(
            store=StoreDetail(
                id=row.id,
                name=row.name,
                address=row.address,
                average_rating=round_rating(row.average_rating),
                total_ratings=row.total_ratings,
            ),
            userRating=OwnRating(
                id=own.id,
                rating=own.rating,
                review=own.review,
                created_at=own.created_at.isoformat(),
                updated_at=own.updated_at.isoformat(),
            )
            if own
            else None,
            recentRatings=[
                RecentRating(
                    rating=r.rating,
                    review=r.review,
                    created_at=r.created_at.isoformat(),
                    user_name=r.user_name,
                )
                for r in recent
            ],
        )
    )


@router.post("/stores/{store_id}/rating", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def submit_rating(
    store_id: Annotated[int, Path(ge=1)],
    rating_data: RatingSubmit,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Rate a store, replacing the caller's previous rating of it if there is one.

    Raises:
        NotFoundError: If the store does not exist
    """
    store = db.query(Store).filter(Store.id == store_id).first()
    if store is None:
        raise NotFoundError("Store not found")

    existing = (
        db.query(Rating)
        .filter(Rating.store_id == store_id, Rating.user_id == current_user.id)
        .first()
    )

    if existing:
        existing.rating = rating_data.rating
        existing.review = rating_data.review
        existing.updated_at = datetime.now(timezone.utc)
        message = "Rating updated successfully"
    else:
        db.add(
            Rating(
                user_id=current_user.id,
                store_id=store_id,
                rating=rating_data.rating,
                review=rating_data.review,
            )
        )
        message = "Rating submitted successfully"
    db.commit()

    logger.info(f"User {current_user.id} rated store {store_id}: {rating_data.rating}")

    return MessageResponse(message=message)


@router.get("/ratings", response_model=UserRatingsResponse, status_code=status.HTTP_200_OK)
def list_my_ratings(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserRatingsResponse:
    """List the caller's ratings, newest first."""
    rows = (
        db.query(
            Rating.id,
            Rating.rating,
            Rating.review,
            Rating.created_at,
            Rating.updated_at,
            Store.id.label("store_id"),
            Store.name.label("store_name"),
            Store.address.label("store_address"),
        )
        .join(Store, Rating.store_id == Store.id)
        .filter(Rating.user_id == current_user.id)
        .order_by(Rating.created_at.desc())
        .all()
    )

    ratings = [
        UserRatingResponse(
            id=row.id,
            rating=row.rating,
            review=row.review,
            created_at=row.created_at.isoformat(),
            updated_at=row.updated_at.isoformat(),
            store_id=row.store_id,
            store_name=row.store_name,
            store_address=row.store_address,
        )
        for row in rows
    ]

    return UserRatingsResponse(data=UserRatingsData(ratings=ratings, total=len(ratings)))
