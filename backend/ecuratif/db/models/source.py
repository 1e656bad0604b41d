"""SQLAlchemy model for maintained equipment and locations."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from ecuratif.db.base import Base


class Source(Base):
    __tablename__ = "source"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    code_gmao = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    infos = relationship("Info", back_populates="source")
