from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class SectionStatus(str, Enum):
    draft = "draft"
    active = "active"
    archived = "archived"
    disabled = "disabled"
    suspended = "suspended"


class CatalogSection(SQLModel, table=True):
    __tablename__ = "catalog_section"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    description: Optional[str] = None
    comments: Optional[str] = None
    status: SectionStatus = Field(default=SectionStatus.draft, sa_column=Column(String, nullable=False))
    is_public: bool = Field(default=False)
    # 1-based position among sibling sections, kept gap-free by section_ordering
    order: int = Field(index=True)
    icon: Optional[str] = None
    color: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    modified_by: Optional[str] = None
    modified_at: Optional[datetime] = None
