from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

class StoreIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    address: str | None = Field(default=None, max_length=400)

class StoreOut(BaseModel):
    id: int
    name: str
    email: str
    address: str | None = None
    owner_id: int | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class StoreAggregateOut(StoreOut):
    average_rating: float = 0
    total_ratings: int = 0

class StoreDetailOut(StoreAggregateOut):
    user_rating: int | None = Field(default=None, serialization_alias="userRating")

class StoreEnvelope(BaseModel):
    message: str
    store: StoreOut

class RatingIn(BaseModel):
    rating: int = Field(ge=1, le=5)

    @field_validator("rating", mode="before")
    @classmethod
    def reject_booleans(cls, value):
        # JSON true/false would otherwise coerce to 1/0
        if isinstance(value, bool):
            raise ValueError("Rating must be an integer between 1 and 5")
        return value

class MessageOut(BaseModel):
    message: str
