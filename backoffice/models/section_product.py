"""
Section Product Model

Publication of a product into a catalog section. Positions are 0-based and
dense within one section.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class SectionProduct(SQLModel, table=True):
    __tablename__ = "section_product"

    __table_args__ = (SAUniqueConstraint("section_id", "product_id", name="uq_section_product"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    section_id: int = Field(foreign_key="catalog_section.id", index=True)
    product_id: int = Field(foreign_key="product.id", index=True)
    position: int = Field(default=0)
    published_by: Optional[str] = Field(default=None)
    published_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
