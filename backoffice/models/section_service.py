"""
Section Service Model

Publication of a service into a catalog section. Positions are 0-based and
dense within one section.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class SectionService(SQLModel, table=True):
    __tablename__ = "section_service"

    __table_args__ = (SAUniqueConstraint("section_id", "service_id", name="uq_section_service"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    section_id: int = Field(foreign_key="catalog_section.id", index=True)
    service_id: int = Field(foreign_key="service.id", index=True)
    position: int = Field(default=0)
    published_by: Optional[str] = Field(default=None)
    published_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
