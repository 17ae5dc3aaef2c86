"""Student model definitions."""

from sqlalchemy import Column, Date, Integer, String
from backend.database import Base


class Student(Base):
    """Represents an enrolled student."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    age = Column(Integer, nullable=False)
    email = Column(String(100), nullable=False)
    birth_date = Column(Date, nullable=False)
