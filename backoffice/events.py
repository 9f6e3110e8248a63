"""
Structured domain events.

Each module has an enumeration of its event kinds; every member carries the
severity it is logged at. Payloads are dataclasses so the fields of an event
are fixed per kind. emit_event() is the single place events are written.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger("backoffice.events")


class _EventKind(str, Enum):
    def __new__(cls, value: str, level: int):
        member = str.__new__(cls, value)
        member._value_ = value
        member.level = level
        return member


class CatalogEvent(_EventKind):
    PRODUCTS_PUBLISH_SUCCESS = ("adminCatalog.products.publish.success", logging.INFO)
    PRODUCTS_PUBLISH_REJECTED = ("adminCatalog.products.publish.validation.error", logging.WARNING)
    PRODUCTS_PUBLISH_DATABASE_ERROR = ("adminCatalog.products.publish.database_error", logging.ERROR)
    PRODUCTS_UNPUBLISH_SUCCESS = ("adminCatalog.products.unpublish.success", logging.INFO)
    PRODUCTS_UNPUBLISH_REJECTED = ("adminCatalog.products.unpublish.validation.error", logging.WARNING)
    PRODUCTS_UNPUBLISH_DATABASE_ERROR = ("adminCatalog.products.unpublish.database_error", logging.ERROR)
    PRODUCTS_MAPPINGS_UPDATED = ("adminCatalog.products.mappings.update.success", logging.INFO)
    PRODUCTS_MAPPINGS_REJECTED = ("adminCatalog.products.mappings.update.validation.error", logging.WARNING)
    PRODUCTS_MAPPINGS_DATABASE_ERROR = ("adminCatalog.products.mappings.update.database_error", logging.ERROR)
    PRODUCT_SECTIONS_UPDATED = ("adminProducts.sections.publish.update.success", logging.INFO)
    PRODUCT_SECTIONS_REJECTED = ("adminProducts.sections.publish.update.validation.error", logging.WARNING)
    PRODUCT_SECTIONS_DATABASE_ERROR = ("adminProducts.sections.publish.update.database_error", logging.ERROR)

    SERVICES_PUBLISH_SUCCESS = ("adminCatalog.services.publish.success", logging.INFO)
    SERVICES_PUBLISH_REJECTED = ("adminCatalog.services.publish.validation.error", logging.WARNING)
    SERVICES_PUBLISH_DATABASE_ERROR = ("adminCatalog.services.publish.database_error", logging.ERROR)
    SERVICES_UNPUBLISH_SUCCESS = ("adminCatalog.services.unpublish.success", logging.INFO)
    SERVICES_UNPUBLISH_REJECTED = ("adminCatalog.services.unpublish.validation.error", logging.WARNING)
    SERVICES_UNPUBLISH_DATABASE_ERROR = ("adminCatalog.services.unpublish.database_error", logging.ERROR)
    SERVICES_MAPPINGS_UPDATED = ("adminCatalog.services.mappings.update.success", logging.INFO)
    SERVICES_MAPPINGS_REJECTED = ("adminCatalog.services.mappings.update.validation.error", logging.WARNING)
    SERVICES_MAPPINGS_DATABASE_ERROR = ("adminCatalog.services.mappings.update.database_error", logging.ERROR)
    SERVICE_SECTIONS_UPDATED = ("adminServices.sections.publish.update.success", logging.INFO)
    SERVICE_SECTIONS_REJECTED = ("adminServices.sections.publish.update.validation.error", logging.WARNING)
    SERVICE_SECTIONS_DATABASE_ERROR = ("adminServices.sections.publish.update.database_error", logging.ERROR)


class SectionEvent(_EventKind):
    CREATE_SUCCESS = ("adminCatalog.section.create.success", logging.INFO)
    CREATE_VALIDATION_ERROR = ("adminCatalog.section.create.validation.error", logging.WARNING)
    UPDATE_SUCCESS = ("adminCatalog.section.update.success", logging.INFO)
    UPDATE_VALIDATION_ERROR = ("adminCatalog.section.update.validation.error", logging.WARNING)
    DELETE_SUCCESS = ("adminCatalog.section.delete.success", logging.INFO)
    DATABASE_ERROR = ("adminCatalog.section.database_error", logging.ERROR)


class ItemEvent(_EventKind):
    CREATE_SUCCESS = ("adminItems.create.success", logging.INFO)
    UPDATE_SUCCESS = ("adminItems.update.success", logging.INFO)
    DELETE_SUCCESS = ("adminItems.delete.success", logging.INFO)
    VALIDATION_ERROR = ("adminItems.validation.error", logging.WARNING)
    DATABASE_ERROR = ("adminItems.database_error", logging.ERROR)


@dataclass
class MappingChange:
    item_type: str
    item_ids: List[int]
    section_ids: List[int]
    added: int = 0
    removed: int = 0
    updated: int = 0
    publisher_id: Optional[str] = None


@dataclass
class MappingFailure:
    item_type: str
    item_ids: List[int]
    section_ids: List[int]
    error: str
    invalid_ids: List[int] = field(default_factory=list)


@dataclass
class SectionChange:
    section_ids: List[int]
    names: List[str] = field(default_factory=list)
    requestor_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ItemChange:
    item_type: str
    item_ids: List[int]
    error: Optional[str] = None


EventPayload = Union[MappingChange, MappingFailure, SectionChange, ItemChange]


def emit_event(kind: _EventKind, payload: EventPayload) -> Dict[str, Any]:
    """Log one domain event and return the record that was written."""
    record = {"event": kind.value, "payload": asdict(payload)}
    logger.log(kind.level, kind.value, extra=record)
    return record
