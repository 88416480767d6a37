"""Tests for user router."""

import pytest
from fastapi.testclient import TestClient

from backend.core.security import create_access_token, verify_password
from backend.models.rating import Rating
from backend.models.user import User, UserRole


@pytest.fixture
def member(create_user):
    return create_user(email="member@example.com")


@pytest.fixture
def store_owner(create_user):
    return create_user(email="owner@example.com", role=UserRole.STORE_OWNER)[0]


def test_user_routes_require_token(test_client: TestClient):
    """Test that user routes reject anonymous requests."""
    response = test_client.get("/api/user/profile")

    assert response.status_code == 401
    assert response.json()["message"] == "No token provided"


def test_get_profile(test_client: TestClient, member, store_owner, create_store, create_rating, auth_headers):
    """Test the profile with the number of ratings given."""
    user, token = member
    create_rating(user, create_store(store_owner, name="First"), 4)
    create_rating(user, create_store(store_owner, name="Second"), 2)

    response = test_client.get("/api/user/profile", headers=auth_headers(token))

    assert response.status_code == 200
    profile = response.json()["data"]["user"]
    assert profile["id"] == user.id
    assert profile["email"] == "member@example.com"
    assert profile["total_ratings_given"] == 2
    assert "password" not in profile


def test_update_profile(test_client: TestClient, member, auth_headers, test_db_session):
    """Test a partial profile update."""
    user, token = member

    response = test_client.put(
        "/api/user/profile",
        json={"name": "Updated Member Full Name", "address": "42 New Road"},
        headers=auth_headers(token),
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Profile updated successfully"}

    test_db_session.refresh(user)
    assert user.name == "Updated Member Full Name"
    assert user.address == "42 New Road"
    assert user.email == "member@example.com"


@pytest.mark.parametrize("address", ["", "   "])
def test_update_profile_blank_address_clears_it(test_client: TestClient, member, auth_headers, test_db_session, address):
    """Test that a blank address is stored as null, like at registration."""
    user, token = member

    response = test_client.put("/api/user/profile", json={"address": address}, headers=auth_headers(token))

    assert response.status_code == 200
    test_db_session.refresh(user)
    assert user.address is None


def test_profile_role_is_serialized_as_value(test_client: TestClient, member, auth_headers):
    """Test that the profile reports the role as its plain string value."""
    _, token = member

    response = test_client.get("/api/user/profile", headers=auth_headers(token))

    assert response.json()["data"]["user"]["role"] == "normal_user"


def test_update_profile_email_taken(test_client: TestClient, member, create_user, auth_headers):
    """Test that another user's email cannot be taken."""
    _, token = member
    create_user(email="taken@example.com")

    response = test_client.put(
        "/api/user/profile",
        json={"email": "taken@example.com"},
        headers=auth_headers(token),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Email is already in use by another user"


def test_update_profile_nothing_to_update(test_client: TestClient, member, auth_headers):
    """Test that an empty update is rejected."""
    _, token = member

    response = test_client.put("/api/user/profile", json={}, headers=auth_headers(token))

    assert response.status_code == 400
    assert response.json()["message"] == "No fields to update"


def test_change_password(test_client: TestClient, member, auth_headers, test_db_session):
    """Test changing the password."""
    user, token = member

    response = test_client.put(
        "/api/user/change-password",
        json={"currentPassword": "Password1!", "newPassword": "NewSecret2@"},
        headers=auth_headers(token),
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Password updated successfully"

    test_db_session.refresh(user)
    assert verify_password("NewSecret2@", user.password) is True


def test_change_password_wrong_current(test_client: TestClient, member, auth_headers):
    """Test that the current password must be right."""
    _, token = member

    response = test_client.put(
        "/api/user/change-password",
        json={"currentPassword": "NotMine1!", "newPassword": "NewSecret2@"},
        headers=auth_headers(token),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Current password is incorrect"


def test_change_password_same_as_current(test_client: TestClient, member, auth_headers):
    """Test that the new password must differ from the current one."""
    _, token = member

    response = test_client.put(
        "/api/user/change-password",
        json={"currentPassword": "Password1!", "newPassword": "Password1!"},
        headers=auth_headers(token),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"


def test_list_stores(test_client: TestClient, member, store_owner, create_user, create_store, create_rating, auth_headers):
    """Test the store list with averages and the caller's own rating."""
    user, token = member
    other, _ = create_user(email="other@example.com")
    zeta = create_store(store_owner, name="Zeta Market")
    alpha = create_store(store_owner, name="Alpha Bakery")
    own = create_rating(user, zeta, 2)
    create_rating(other, zeta, 5)

    response = test_client.get("/api/user/stores", headers=auth_headers(token))

    assert response.status_code == 200
    stores = response.json()["stores"]
    assert [store["id"] for store in stores] == [alpha.id, zeta.id]

    assert stores[0]["average_rating"] == 0
    assert stores[0]["user_rating"] is None
    assert stores[0]["user_rating_id"] is None

    assert stores[1]["average_rating"] == 3.5
    assert stores[1]["total_ratings"] == 2
    assert stores[1]["user_rating"] == 2
    assert stores[1]["user_rating_id"] == own.id
    assert stores[1]["user_rating_date"] is not None


def test_get_store(test_client: TestClient, member, store_owner, create_user, create_store, create_rating, auth_headers):
    """Test store details with the caller's rating and other users' recent ratings."""
    user, token = member
    other, _ = create_user(email="other@example.com", name="Another Rating Person")
    store = create_store(store_owner, name="Deli")
    create_rating(user, store, 4, review="Good")
    create_rating(other, store, 2, review="Meh")

    response = test_client.get(f"/api/user/stores/{store.id}", headers=auth_headers(token))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["store"]["name"] == "Deli"
    assert data["store"]["average_rating"] == 3.0
    assert data["store"]["total_ratings"] == 2
    assert data["userRating"]["rating"] == 4
    assert data["userRating"]["review"] == "Good"
    assert data["recentRatings"] == [
        {
            "rating": 2,
            "review": "Meh",
            "created_at": data["recentRatings"][0]["created_at"],
            "user_name": "Another Rating Person",
        }
    ]


def test_get_store_not_found(test_client: TestClient, member, auth_headers):
    """Test that a missing store returns 404."""
    _, token = member

    response = test_client.get("/api/user/stores/999", headers=auth_headers(token))

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Store not found"}


def test_submit_rating(test_client: TestClient, member, store_owner, create_store, auth_headers, test_db_session):
    """Test submitting a new rating."""
    user, token = member
    store = create_store(store_owner)

    response = test_client.post(
        f"/api/user/stores/{store.id}/rating",
        json={"rating": 5, "review": "  Lovely place  "},
        headers=auth_headers(token),
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Rating submitted successfully"

    rating = test_db_session.query(Rating).filter(Rating.user_id == user.id).one()
    assert rating.store_id == store.id
    assert rating.rating == 5
    assert rating.review == "Lovely place"


def test_submit_rating_twice_updates(test_client: TestClient, member, store_owner, create_store, auth_headers, test_db_session):
    """Test that rating the same store again replaces the earlier rating."""
    user, token = member
    store = create_store(store_owner)

    test_client.post(f"/api/user/stores/{store.id}/rating", json={"rating": 2}, headers=auth_headers(token))
    response = test_client.post(
        f"/api/user/stores/{store.id}/rating",
        json={"rating": 4, "review": "Better now"},
        headers=auth_headers(token),
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Rating updated successfully"

    ratings = test_db_session.query(Rating).filter(Rating.user_id == user.id).all()
    assert len(ratings) == 1
    assert ratings[0].rating == 4
    assert ratings[0].review == "Better now"


@pytest.mark.parametrize("value", [0, 6, "five"])
def test_submit_rating_out_of_range(test_client: TestClient, member, store_owner, create_store, auth_headers, value):
    """Test that ratings must be integers from 1 to 5."""
    _, token = member
    store = create_store(store_owner)

    response = test_client.post(
        f"/api/user/stores/{store.id}/rating",
        json={"rating": value},
        headers=auth_headers(token),
    )

    assert response.status_code == 400
    assert any(err["field"] == "rating" for err in response.json()["errors"])


def test_submit_rating_missing_store(test_client: TestClient, member, auth_headers):
    """Test that rating a missing store returns 404."""
    _, token = member

    response = test_client.post("/api/user/stores/999/rating", json={"rating": 3}, headers=auth_headers(token))

    assert response.status_code == 404


def test_list_my_ratings(test_client: TestClient, member, store_owner, create_user, create_store, create_rating, auth_headers):
    """Test the caller's own ratings, newest first."""
    user, token = member
    other, _ = create_user(email="other@example.com")
    first = create_store(store_owner, name="First Stop", address="1 First Ave")
    second = create_store(store_owner, name="Second Stop")
    old = create_rating(user, first, 3, age_minutes=10)
    new = create_rating(user, second, 4)
    create_rating(other, first, 1)

    response = test_client.get("/api/user/ratings", headers=auth_headers(token))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 2
    assert [rating["id"] for rating in data["ratings"]] == [new.id, old.id]
    assert data["ratings"][1]["store_name"] == "First Stop"
    assert data["ratings"][1]["store_address"] == "1 First Ave"


@pytest.mark.parametrize("role", [UserRole.STORE_OWNER, UserRole.ADMIN])
@pytest.mark.parametrize("path", ["/api/user/profile", "/api/user/stores", "/api/user/ratings"])
def test_user_routes_forbid_other_roles(test_client: TestClient, create_user, auth_headers, path, role):
    """Test that only normal users may use the user routes."""
    _, token = create_user(email="owner2@example.com", role=role)

    response = test_client.get(path, headers=auth_headers(token))

    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Insufficient permissions"}


def test_store_owner_cannot_rate(test_client: TestClient, store_owner, create_store, auth_headers, test_db_session):
    """Test that a store owner cannot submit ratings, even for other owners' stores."""
    store = create_store(store_owner)
    token = create_access_token(store_owner.id, UserRole.STORE_OWNER)

    response = test_client.post(
        f"/api/user/stores/{store.id}/rating",
        json={"rating": 5},
        headers=auth_headers(token),
    )

    assert response.status_code == 403
    assert test_db_session.query(Rating).count() == 0


def test_token_role_mismatch_is_rejected(test_client: TestClient, member, auth_headers, test_db_session):
    """Test that a token whose role no longer matches the stored role is rejected."""
    user, token = member
    test_db_session.query(User).filter(User.id == user.id).update({"role": UserRole.ADMIN.value})
    test_db_session.commit()

    response = test_client.get("/api/user/profile", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"
