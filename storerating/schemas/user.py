import re
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from storerating.models.user import UserRole
from storerating.schemas.store import StoreAggregateOut

PASSWORD_UPPERCASE = re.compile(r"[A-Z]")
PASSWORD_SPECIAL = re.compile(r"[!@#$%^&*]")

def check_password_strength(value: str) -> str:
    if not PASSWORD_UPPERCASE.search(value) or not PASSWORD_SPECIAL.search(value):
        raise ValueError("Password must contain at least one uppercase letter and one special character")
    return value

class UserOut(BaseModel):
    id: int
    name: str
    email: str
    address: str | None = None
    role: UserRole
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class UserDetailOut(UserOut):
    # only filled in for store owners
    stores: list[StoreAggregateOut] | None = None

class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=60)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    address: str | None = Field(default=None, max_length=400)
    role: UserRole = UserRole.USER

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return check_password_strength(value)

class UserUpdate(BaseModel):
    name: str = Field(min_length=2, max_length=60)
    email: EmailStr
    address: str | None = Field(default=None, max_length=400)
    role: UserRole

class DashboardStats(BaseModel):
    total_users: int
    total_stores: int
    total_ratings: int
    total_admins: int
    total_store_owners: int
    total_normal_users: int
