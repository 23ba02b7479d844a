import re
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, StrictInt, field_validator, model_validator

from store_ratings.models.user import Role

NAME_MIN_LENGTH = 20
NAME_MAX_LENGTH = 60
ADDRESS_MAX_LENGTH = 400
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 16
COMMENT_MAX_LENGTH = 1000

_SPECIAL_CHAR = re.compile(r"[^A-Za-z0-9]")


def check_password_strength(value: str) -> str:
    if not any(c.isupper() for c in value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not _SPECIAL_CHAR.search(value):
        raise ValueError("Password must contain at least one special character")
    return value


# --- Shared ---
class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total: int
    limit: int


class MessageResponse(BaseModel):
    message: str


class RatingAggregate(BaseModel):
    average_rating: float = 0.0
    total_ratings: int = 0


# --- Auth / Users ---
class UserBase(BaseModel):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    address: str = Field(..., min_length=1, max_length=ADDRESS_MAX_LENGTH)


class UserCreate(UserBase):
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value):
        return check_password_strength(value)


class AdminUserCreate(UserCreate):
    role: Role = Role.NORMAL_USER


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    address: Optional[str] = Field(None, min_length=1, max_length=ADDRESS_MAX_LENGTH)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.name is None and self.address is None:
            raise ValueError("No fields to update")
        return self


class PasswordUpdate(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, value):
        return check_password_strength(value)


class RoleUpdate(BaseModel):
    role: Role


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    address: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class Token(BaseModel):
    access_token: str
    token_type: str


class UserListResponse(BaseModel):
    users: List[UserResponse]
    pagination: Pagination


# --- Stores ---
class StoreBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    address: str = Field(..., min_length=1, max_length=ADDRESS_MAX_LENGTH)
    owner_id: Optional[int] = Field(None, gt=0)


class StoreCreate(StoreBase):
    pass


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, min_length=1, max_length=ADDRESS_MAX_LENGTH)
    owner_id: Optional[int] = Field(None, gt=0)


class StoreResponse(BaseModel):
    id: int
    name: str
    email: str
    address: str
    owner_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StoreSummary(RatingAggregate):
    id: int
    name: str
    address: str
    email: Optional[str] = None
    owner_id: Optional[int] = None
    owner_name: Optional[str] = None
    created_at: Optional[datetime] = None
    user_rating: Optional[int] = None


class StoreListResponse(BaseModel):
    stores: List[StoreSummary]
    pagination: Pagination


# --- Ratings ---
class RatingCreate(BaseModel):
    rating: StrictInt = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=COMMENT_MAX_LENGTH)

    @field_validator("comment")
    @classmethod
    def blank_comment_is_none(cls, value):
        if value is not None and not value.strip():
            return None
        return value


class RatingResponse(BaseModel):
    id: int
    user_id: int
    store_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RatingSubmitResponse(BaseModel):
    message: str
    rating: RatingResponse
    store_stats: RatingAggregate


class RatingDeleteResponse(BaseModel):
    message: str
    store_stats: RatingAggregate
