from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class ProductStatus(str, Enum):
    draft = "draft"
    active = "active"
    archived = "archived"


class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    product_code: str = Field(index=True, unique=True)
    name: str
    status: ProductStatus = Field(default=ProductStatus.draft, sa_column=Column(String, nullable=False))
    # Derived: true iff at least one section_product row references this product
    is_published: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"onupdate": lambda: datetime.now(timezone.utc)},
    )
