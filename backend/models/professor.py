"""Professor model definitions."""

from sqlalchemy import Column, Integer, String
from backend.database import Base


class Professor(Base):
    """Represents a professor who teaches courses."""
    __tablename__ = "professors"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False)
