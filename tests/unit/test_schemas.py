"""
Tests for request validation rules
"""
import pytest
from pydantic import ValidationError

from store_ratings.models.user import Role
from store_ratings.schemas import (
    AdminUserCreate,
    PasswordUpdate,
    ProfileUpdate,
    RatingCreate,
    StoreCreate,
    UserCreate,
)

VALID_USER = {
    "name": "Valid Name For A Test User",
    "email": "valid@example.com",
    "password": "Secret@123",
    "address": "1 Test Street",
}


@pytest.mark.unit
class TestUserCreate:
    def test_valid(self):
        user = UserCreate(**VALID_USER)
        assert user.email == "valid@example.com"

    @pytest.mark.parametrize("name", ["Too Short", "x" * 61])
    def test_name_length(self, name):
        with pytest.raises(ValidationError):
            UserCreate(**dict(VALID_USER, name=name))

    def test_name_boundaries(self):
        UserCreate(**dict(VALID_USER, name="x" * 20))
        UserCreate(**dict(VALID_USER, name="x" * 60))

    @pytest.mark.parametrize(
        "password",
        [
            "Sh@rt1",             # too short
            "Longer@Than16Chars",  # too long
            "nouppercase@1",      # no uppercase letter
            "NoSpecialChar1",     # no special character
        ],
    )
    def test_password_rule(self, password):
        with pytest.raises(ValidationError):
            UserCreate(**dict(VALID_USER, password=password))

    def test_bad_email(self):
        with pytest.raises(ValidationError):
            UserCreate(**dict(VALID_USER, email="not-an-email"))

    def test_address_too_long(self):
        with pytest.raises(ValidationError):
            UserCreate(**dict(VALID_USER, address="a" * 401))

    def test_admin_create_defaults_to_normal_user(self):
        assert AdminUserCreate(**VALID_USER).role == Role.NORMAL_USER
        assert AdminUserCreate(**VALID_USER, role="store_owner").role == Role.STORE_OWNER

    def test_admin_create_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            AdminUserCreate(**VALID_USER, role="superuser")


@pytest.mark.unit
class TestProfileAndPassword:
    def test_profile_requires_a_field(self):
        with pytest.raises(ValidationError):
            ProfileUpdate()

    def test_profile_address_only(self):
        assert ProfileUpdate(address="2 New Street").name is None

    def test_new_password_rule(self):
        with pytest.raises(ValidationError):
            PasswordUpdate(current_password="anything", new_password="weakpassword")
        PasswordUpdate(current_password="anything", new_password="Strong@123")


@pytest.mark.unit
class TestRatingCreate:
    @pytest.mark.parametrize("value", [1, 3, 5])
    def test_in_range(self, value):
        assert RatingCreate(rating=value).rating == value

    @pytest.mark.parametrize("value", [0, 6, -1, 3.5, "4"])
    def test_rejects_out_of_range_and_non_integers(self, value):
        with pytest.raises(ValidationError):
            RatingCreate(rating=value)

    def test_comment_length(self):
        RatingCreate(rating=4, comment="c" * 1000)
        with pytest.raises(ValidationError):
            RatingCreate(rating=4, comment="c" * 1001)

    def test_blank_comment_becomes_none(self):
        assert RatingCreate(rating=4, comment="   ").comment is None


@pytest.mark.unit
class TestStoreCreate:
    def test_owner_id_must_be_positive(self):
        with pytest.raises(ValidationError):
            StoreCreate(name="Shop", email="shop@example.com", address="Somewhere", owner_id=0)

    def test_owner_optional(self):
        assert StoreCreate(name="Shop", email="shop@example.com", address="Somewhere").owner_id is None
