"""Store schemas."""

from pydantic import BaseModel


class OwnerStoreResponse(BaseModel):
    """A store owned by the caller, with its rating statistics."""

    id: int
    name: str
    email: str
    address: str
    created_at: str
    average_rating: float
    total_ratings: int
    total_rating_users: int


class OwnerStoresData(BaseModel):
    stores: list[OwnerStoreResponse]


class OwnerStoresResponse(BaseModel):
    success: bool = True
    data: OwnerStoresData


class DashboardStats(BaseModel):
    """Statistics across every store the caller owns."""

    averageRating: float
    totalRatings: int
    storeCount: int


class DashboardStatsResponse(BaseModel):
    success: bool = True
    data: DashboardStats


class StoreSummary(BaseModel):
    """A store as seen by a rating user, with the caller's own rating if any."""

    id: int
    name: str
    address: str
    average_rating: float
    total_ratings: int
    user_rating: int | None = None
    user_rating_id: int | None = None
    user_rating_date: str | None = None


class StoreListResponse(BaseModel):
    success: bool = True
    stores: list[StoreSummary]
