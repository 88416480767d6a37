"""Store owner router: rating statistics for the caller's own stores."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from backend.core.dependencies import get_current_user, require_store_owner
from backend.core.ratings import StoreRatingStats, overall_average, round_rating, store_stat_columns
from backend.database import get_db
from backend.models.rating import Rating
from backend.models.store import Store
from backend.models.user import User
from backend.schemas.rating import OwnerRatingResponse, OwnerRatingsData, OwnerRatingsResponse
from backend.schemas.store import (
    DashboardStats,
    DashboardStatsResponse,
    OwnerStoreResponse,
    OwnerStoresData,
    OwnerStoresResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/store-owner",
    tags=["store-owner"],
    dependencies=[Depends(require_store_owner)],
)


@router.get("/stores", response_model=OwnerStoresResponse, status_code=status.HTTP_200_OK)
def list_owned_stores(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> OwnerStoresResponse:
    """List the caller's stores, newest first, with rating statistics.

    Args:
        current_user: Authenticated store owner
        db: Database session

    Returns:
        OwnerStoresResponse: Stores with average rating, rating count and distinct raters
    """
    rows = (
        db.query(
            Store.id,
            Store.name,
            Store.email,
            Store.address,
            Store.created_at,
            *store_stat_columns(),
            func.count(distinct(Rating.user_id)).label("total_rating_users"),
        )
        .outerjoin(Rating, Rating.store_id == Store.id)
        .filter(Store.owner_id == current_user.id)
        .group_by(Store.id)
        .order_by(Store.created_at.desc())
        .all()
    )

    stores = [
        OwnerStoreResponse(
            id=row.id,
            name=row.name,
            email=row.email,
            address=row.address,
            created_at=row.created_at.isoformat(),
            average_rating=round_rating(row.average_rating),
            total_ratings=row.total_ratings,
            total_rating_users=row.total_rating_users,
        )
        for row in rows
    ]

    logger.info(f"Retrieved {len(stores)} stores for owner {current_user.id}")

    return OwnerStoresResponse(data=OwnerStoresData(stores=stores))


@router.get("/dashboard/stats", response_model=DashboardStatsResponse, status_code=status.HTTP_200_OK)
def get_dashboard_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> DashboardStatsResponse:
    """Overall statistics across the caller's stores.

    The overall average weights each store's average by its number of ratings.

    Args:
        current_user: Authenticated store owner
        db: Database session

    Returns:
        DashboardStatsResponse: averageRating, totalRatings and storeCount
    """
    rows = (
        db.query(Store.id, *store_stat_columns())
        .outerjoin(Rating, Rating.store_id == Store.id)
        .filter(Store.owner_id == current_user.id)
        .group_by(Store.id)
        .all()
    )

    stats = [StoreRatingStats(float(row.average_rating or 0), int(row.total_ratings)) for row in rows]

    return DashboardStatsResponse(
        data=DashboardStats(
            averageRating=overall_average(stats),
            totalRatings=sum(store.total_ratings for store in stats),
            storeCount=len(stats),
        )
    )


@router.get("/ratings", response_model=OwnerRatingsResponse, status_code=status.HTTP_200_OK)
def list_owned_store_ratings(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> OwnerRatingsResponse:
    """List every rating on the caller's stores, newest first.

    Args:
        current_user: Authenticated store owner
        db: Database session

    Returns:
        OwnerRatingsResponse: Ratings with rater and store details, plus the total count
    """
    rows = (
        db.query(
            Rating.id,
            Rating.rating,
            Rating.review,
            Rating.created_at,
            Rating.updated_at,
            User.id.label("user_id"),
            User.name.label("user_name"),
            User.email.label("user_email"),
            User.address.label("user_address"),
            Store.id.label("store_id"),
            Store.name.label("store_name"),
        )
        .join(User, Rating.user_id == User.id)
        .join(Store, Rating.store_id == Store.id)
        .filter(Store.owner_id == current_user.id)
        .order_by(Rating.created_at.desc())
        .all()
    )

    total = (
        db.query(func.count(Rating.id))
        .join(Store, Rating.store_id == Store.id)
        .filter(Store.owner_id == current_user.id)
        .scalar()
    )

    ratings = [
        OwnerRatingResponse(
            id=row.id,
            rating=row.rating,
            review=row.review,
            created_at=row.created_at.isoformat(),
            updated_at=row.updated_at.isoformat(),
            user_id=row.user_id,
            user_name=row.user_name,
            user_email=row.user_email,
            user_address=row.user_address,
            store_id=row.store_id,
            store_name=row.store_name,
        )
        for row in rows
    ]

    return OwnerRatingsResponse(data=OwnerRatingsData(ratings=ratings, total=total or 0))
