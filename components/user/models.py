"""User model for the database."""

from sqlalchemy import Column, Integer, String, Date
from sqlalchemy.orm import relationship

from components.core.database import Base


class User(Base):
    """User model representing an account owner in the system."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    login = Column(String(50), unique=True, nullable=False)
    password = Column(String(255), nullable=False)  # Hashed password
    registration_date = Column(Date, nullable=False)

    clients = relationship("Client", back_populates="user", cascade="all, delete-orphan")
    workers = relationship("Worker", back_populates="user", cascade="all, delete-orphan")
