"""SQLAlchemy model for maintenance events attached to a source."""

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from ecuratif.db.base import Base


class Info(Base):
    __tablename__ = "info"

    id = Column(Integer, primary_key=True)
    source_id = Column(
        Integer, ForeignKey("source.id", ondelete="CASCADE"), nullable=False
    )
    agent = Column(String(255))
    event = Column(String(255))
    material = Column(String(255))
    pilot = Column(String(255))
    detail = Column(Text)
    target = Column(String(255))
    day_done = Column(String(64))
    priority = Column(Integer, nullable=False)
    estimate = Column(String(255))
    oups = Column(String(255))
    brips = Column(String(255))
    ameps = Column(String(255))
    rte = Column(String(255))
    ais = Column(String(255))
    doneby = Column(String(255))
    counter = Column(Integer, default=0)
    # One of the InfoStatus values; also used as a filter predicate.
    status = Column(String(32), nullable=False)
    created = Column(Date, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    source = relationship("Source", back_populates="infos")

    __table_args__ = (Index("ix_info_source_status", "source_id", "status"),)
