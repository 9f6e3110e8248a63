"""
Publication kinds.

A PublicationKind binds one publishable item type to the table its mappings
live in and the status an item needs before it can be published. The
validator, mutator and coordinator only ever talk to items through a kind.
"""

from dataclasses import dataclass
from typing import Any, Dict, Type

from sqlmodel import SQLModel

from backoffice.events import CatalogEvent
from backoffice.models.product import Product, ProductStatus
from backoffice.models.section_product import SectionProduct
from backoffice.models.section_service import SectionService
from backoffice.models.service import Service, ServiceStatus


@dataclass(frozen=True)
class PublicationKind:
    name: str  # "product" / "service"
    plural: str  # "products" / "services"
    item_model: Type[SQLModel]
    mapping_model: Type[SQLModel]
    item_fk: str  # mapping column that references the item
    eligible_status: str
    label_attr: str  # item attribute shown to admins
    events: Dict[str, CatalogEvent]

    @property
    def item_column(self) -> Any:
        return getattr(self.mapping_model, self.item_fk)

    def new_mapping(self, item_id: int, section_id: int, position: int, published_by=None) -> SQLModel:
        return self.mapping_model(
            **{self.item_fk: item_id}, section_id=section_id, position=position, published_by=published_by
        )

    def item_id_of(self, mapping: SQLModel) -> int:
        return getattr(mapping, self.item_fk)


PRODUCTS = PublicationKind(
    name="product",
    plural="products",
    item_model=Product,
    mapping_model=SectionProduct,
    item_fk="product_id",
    eligible_status=ProductStatus.active.value,
    label_attr="product_code",
    events={
        "publish": CatalogEvent.PRODUCTS_PUBLISH_SUCCESS,
        "publish_rejected": CatalogEvent.PRODUCTS_PUBLISH_REJECTED,
        "publish_error": CatalogEvent.PRODUCTS_PUBLISH_DATABASE_ERROR,
        "unpublish": CatalogEvent.PRODUCTS_UNPUBLISH_SUCCESS,
        "unpublish_rejected": CatalogEvent.PRODUCTS_UNPUBLISH_REJECTED,
        "unpublish_error": CatalogEvent.PRODUCTS_UNPUBLISH_DATABASE_ERROR,
        "mappings": CatalogEvent.PRODUCTS_MAPPINGS_UPDATED,
        "mappings_rejected": CatalogEvent.PRODUCTS_MAPPINGS_REJECTED,
        "mappings_error": CatalogEvent.PRODUCTS_MAPPINGS_DATABASE_ERROR,
        "item_sections": CatalogEvent.PRODUCT_SECTIONS_UPDATED,
        "item_sections_rejected": CatalogEvent.PRODUCT_SECTIONS_REJECTED,
        "item_sections_error": CatalogEvent.PRODUCT_SECTIONS_DATABASE_ERROR,
    },
)

SERVICES = PublicationKind(
    name="service",
    plural="services",
    item_model=Service,
    mapping_model=SectionService,
    item_fk="service_id",
    eligible_status=ServiceStatus.in_production.value,
    label_attr="name",
    events={
        "publish": CatalogEvent.SERVICES_PUBLISH_SUCCESS,
        "publish_rejected": CatalogEvent.SERVICES_PUBLISH_REJECTED,
        "publish_error": CatalogEvent.SERVICES_PUBLISH_DATABASE_ERROR,
        "unpublish": CatalogEvent.SERVICES_UNPUBLISH_SUCCESS,
        "unpublish_rejected": CatalogEvent.SERVICES_UNPUBLISH_REJECTED,
        "unpublish_error": CatalogEvent.SERVICES_UNPUBLISH_DATABASE_ERROR,
        "mappings": CatalogEvent.SERVICES_MAPPINGS_UPDATED,
        "mappings_rejected": CatalogEvent.SERVICES_MAPPINGS_REJECTED,
        "mappings_error": CatalogEvent.SERVICES_MAPPINGS_DATABASE_ERROR,
        "item_sections": CatalogEvent.SERVICE_SECTIONS_UPDATED,
        "item_sections_rejected": CatalogEvent.SERVICE_SECTIONS_REJECTED,
        "item_sections_error": CatalogEvent.SERVICE_SECTIONS_DATABASE_ERROR,
    },
)

ALL_KINDS = (PRODUCTS, SERVICES)
