"""User ORM model."""

from sqlalchemy import Column, Integer, String, Enum, DateTime
from sqlalchemy.sql import func

from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False)
    # passlib hash string; the salt and round count are embedded in it
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    role = Column(Enum("admin", "user", name="user_role"), nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
