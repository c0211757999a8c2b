from pydantic import BaseModel, EmailStr, Field, field_validator
from storerating.schemas.user import UserOut, check_password_strength

class RegisterIn(BaseModel):
    name: str = Field(min_length=2, max_length=60)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    address: str | None = Field(default=None, max_length=400)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return check_password_strength(value)

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class LoginOut(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserOut

class UserEnvelope(BaseModel):
    message: str | None = None
    user: UserOut
