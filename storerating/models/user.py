from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, DateTime, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from storerating.db.session import Base

class UserRole(str, PyEnum):
    ADMIN = "admin"
    STORE_OWNER = "store_owner"
    USER = "user"

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(60), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    address = Column(String(400), nullable=True)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=UserRole.USER,
        index=True,
    )
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    # stores outlive their owner, the foreign key is nulled on delete
    stores = relationship("Store", back_populates="owner")
    ratings = relationship("Rating", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
