"""Course model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from backend.database import Base


class Course(Base):
    """Represents a course taught by a single professor."""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    professor_id = Column(Integer, ForeignKey("professors.id"), nullable=False)
