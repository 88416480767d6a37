"""Admin router: system statistics and user and store management."""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from backend.core.dependencies import require_role
from backend.core.errors import BadRequestError, NotFoundError
from backend.core.ratings import round_rating, store_stat_columns
from backend.core.security import hash_password
from backend.database import get_db
from backend.models.rating import Rating
from backend.models.store import Store
from backend.models.user import User, UserRole
from backend.schemas.admin import (
    PAGE_LIMIT,
    AdminStats,
    AdminStatsResponse,
    AdminStore,
    AdminStoreResponse,
    AdminStoresData,
    AdminStoresResponse,
    AdminUser,
    AdminUserCreate,
    AdminUserResponse,
    AdminUsersData,
    AdminUsersResponse,
    StoreCreate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_role(UserRole.ADMIN))],
)


def _admin_user(user: User) -> AdminUser:
    return AdminUser(
        id=user.id,
        name=user.name,
        email=user.email,
        address=user.address,
        role=user.role,
        created_at=user.created_at.isoformat(),
    )


def _store_query(db: Session) -> Query:
    """Stores with their owner's name and rating statistics."""
    return (
        db.query(
            Store.id,
            Store.name,
            Store.email,
            Store.address,
            Store.owner_id,
            Store.created_at,
            User.name.label("owner_name"),
            *store_stat_columns(),
        )
        .outerjoin(User, Store.owner_id == User.id)
        .outerjoin(Rating, Rating.store_id == Store.id)
        .group_by(Store.id, User.name)
    )


def _admin_store(row) -> AdminStore:
    return AdminStore(
        id=row.id,
        name=row.name,
        email=row.email,
        address=row.address,
        owner_id=row.owner_id,
        owner_name=row.owner_name,
        created_at=row.created_at.isoformat(),
        average_rating=round_rating(row.average_rating),
        total_ratings=row.total_ratings,
    )


@router.get("/dashboard/stats", response_model=AdminStatsResponse, status_code=status.HTTP_200_OK)
def get_dashboard_stats(db: Annotated[Session, Depends(get_db)]) -> AdminStatsResponse:
    """Count users, stores and ratings, and average every rating in the system."""
    average = db.query(func.avg(Rating.rating)).scalar()

    return AdminStatsResponse(
        data=AdminStats(
            totalUsers=db.query(func.count(User.id)).scalar(),
            totalStores=db.query(func.count(Store.id)).scalar(),
            totalRatings=db.query(func.count(Rating.id)).scalar(),
            averageRating=f"{float(average or 0):.2f}",
        )
    )


@router.get("/users", response_model=AdminUsersResponse, status_code=status.HTTP_200_OK)
def list_users(db: Annotated[Session, Depends(get_db)]) -> AdminUsersResponse:
    """List the newest users, up to one page."""
    users = db.query(User).order_by(User.created_at.desc()).limit(PAGE_LIMIT).all()
    total = db.query(func.count(User.id)).scalar()

    return AdminUsersResponse(
        data=AdminUsersData(users=[_admin_user(user) for user in users], total=total or 0)
    )


@router.get("/users/{user_id}", response_model=AdminUserResponse, status_code=status.HTTP_200_OK)
def get_user(
    user_id: Annotated[int, Path(ge=1)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminUserResponse:
    """Return one user.

    Raises:
        NotFoundError: If the user does not exist
    """
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return AdminUserResponse(data=_admin_user(user))


@router.post("/users", response_model=AdminUserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: AdminUserCreate,
    db: Annotated[Session, Depends(get_db)],
) -> AdminUserResponse:
    """Create a user with any role.

    Raises:
        BadRequestError: If the email is already registered
    """
    if db.query(User).filter(User.email == user_data.email).first():
        raise BadRequestError("Email already exists")

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        password=hash_password(user_data.password),
        address=user_data.address,
        role=user_data.role.value,
        created_at=datetime.now(timezone.utc),
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BadRequestError("Email already exists")
    db.refresh(new_user)

    logger.info(f"Admin created user {new_user.id} with role {new_user.role}")

    return AdminUserResponse(message="User created successfully", data=_admin_user(new_user))


@router.get("/stores", response_model=AdminStoresResponse, status_code=status.HTTP_200_OK)
def list_stores(db: Annotated[Session, Depends(get_db)]) -> AdminStoresResponse:
    """List the newest stores, up to one page, with owner names and rating statistics."""
    rows = _store_query(db).order_by(Store.created_at.desc()).limit(PAGE_LIMIT).all()
    total = db.query(func.count(Store.id)).scalar()

    return AdminStoresResponse(
        data=AdminStoresData(stores=[_admin_store(row) for row in rows], total=total or 0)
    )


@router.get("/stores/{store_id}", response_model=AdminStoreResponse, status_code=status.HTTP_200_OK)
def get_store(
    store_id: Annotated[int, Path(ge=1)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminStoreResponse:
    """Return one store with its owner's name and rating statistics.

    Raises:
        NotFoundError: If the store does not exist
    """
    row = _store_query(db).filter(Store.id == store_id).first()
    if row is None:
        raise NotFoundError("Store not found")
    return AdminStoreResponse(data=_admin_store(row))


@router.post("/stores", response_model=AdminStoreResponse, status_code=status.HTTP_201_CREATED)
def create_store(
    store_data: StoreCreate,
    db: Annotated[Session, Depends(get_db)],
) -> AdminStoreResponse:
    """Create a store owned by an existing store owner.

    Raises:
        BadRequestError: If the store email is taken or the owner is not a store owner
    """
    if db.query(Store).filter(Store.email == store_data.email).first():
        raise BadRequestError("Store email already exists")

    owner = (
        db.query(User)
        .filter(User.id == store_data.owner_id, User.role == UserRole.STORE_OWNER.value)
        .first()
    )
    if owner is None:
        raise BadRequestError("Invalid owner ID or user is not a store owner")

    store = Store(
        name=store_data.name,
        email=store_data.email,
        address=store_data.address,
        owner_id=owner.id,
        created_at=datetime.now(timezone.utc),
    )
    db.add(store)
    db.commit()
    db.refresh(store)

    logger.info(f"Admin created store {store.id} for owner {owner.id}")

    row = _store_query(db).filter(Store.id == store.id).one()
    return AdminStoreResponse(message="Store created successfully", data=_admin_store(row))
