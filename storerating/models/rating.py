from sqlalchemy import (
    Column, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from storerating.db.session import Base

class Rating(Base):
    __tablename__ = "ratings"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        # one rating per user and store; the upsert relies on this
        UniqueConstraint("user_id", "store_id", name="uq_ratings_user_store"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_range"),
    )

    user = relationship("User", back_populates="ratings")
    store = relationship("Store", back_populates="ratings")

    def __repr__(self):
        return f"<Rating(user_id={self.user_id}, store_id={self.store_id}, rating={self.rating})>"
