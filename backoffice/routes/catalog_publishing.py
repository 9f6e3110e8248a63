"""
API Routes for catalog publishing - products/services into catalog sections
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from backoffice.database import get_session
from backoffice.exceptions import NotFoundError
from backoffice.services.publication_kinds import PRODUCTS, SERVICES, PublicationKind
from backoffice.services.publication_queries import fetch_publishing_items, fetch_section_items
from backoffice.services.publication_service import PublicationResult, PublicationService
from backoffice.utils.http import envelope, failure_response, get_requestor_id

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class ProductPublishRequest(BaseModel):
    product_ids: List[int] = []
    section_ids: List[int] = []


class ServicePublishRequest(BaseModel):
    service_ids: List[int] = []
    section_ids: List[int] = []


class ProductMappingsRequest(BaseModel):
    section_id: int
    product_ids: List[int] = []


class ServiceMappingsRequest(BaseModel):
    section_id: int
    service_ids: List[int] = []


class PublishResponse(BaseModel):
    success: bool
    message: str
    addedCount: int
    updatedCount: int


class UnpublishResponse(BaseModel):
    success: bool
    message: str
    removedCount: int


class MappingsResponse(BaseModel):
    success: bool
    message: str
    addedCount: int
    removedCount: int


def _respond(result: PublicationResult, body: dict):
    """Unsuccessful results become 400 envelopes carrying the offending ids."""
    if not result.success:
        extra = {key: 0 for key in body if key.endswith("Count")}
        if result.invalid_ids:
            extra["invalidIds"] = result.invalid_ids
        return failure_response(400, result.message, **extra)
    return envelope(True, result.message, **body)


def _publish(session: Session, kind: PublicationKind, item_ids, section_ids, publisher_id: str):
    result = PublicationService(session, kind).publish(item_ids, section_ids, publisher_id)
    return _respond(result, {"addedCount": result.added, "updatedCount": result.updated})


def _unpublish(session: Session, kind: PublicationKind, item_ids, section_ids):
    result = PublicationService(session, kind).unpublish(item_ids, section_ids)
    return _respond(result, {"removedCount": result.removed})


def _update_mappings(session: Session, kind: PublicationKind, section_id, item_ids, publisher_id: str):
    result = PublicationService(session, kind).update_container_mappings(section_id, item_ids, publisher_id)
    return _respond(result, {"addedCount": result.added, "removedCount": result.removed})


# ============================================================================
# Publish / Unpublish
# ============================================================================


@router.post("/catalog/product-publish", response_model=PublishResponse)
def product_publish(
    request: ProductPublishRequest,
    session: Session = Depends(get_session),
    publisher_id: Optional[str] = Depends(get_requestor_id),
):
    """Publish products into catalog sections (idempotent per pair)"""
    return _publish(session, PRODUCTS, request.product_ids, request.section_ids, publisher_id)


@router.post("/catalog/product-unpublish", response_model=UnpublishResponse)
def product_unpublish(
    request: ProductPublishRequest,
    session: Session = Depends(get_session),
):
    """Remove product/section pairs"""
    return _unpublish(session, PRODUCTS, request.product_ids, request.section_ids)


@router.post("/catalog/service-publish", response_model=PublishResponse)
def service_publish(
    request: ServicePublishRequest,
    session: Session = Depends(get_session),
    publisher_id: Optional[str] = Depends(get_requestor_id),
):
    """Publish services into catalog sections (idempotent per pair)"""
    return _publish(session, SERVICES, request.service_ids, request.section_ids, publisher_id)


@router.post("/catalog/service-unpublish", response_model=UnpublishResponse)
def service_unpublish(
    request: ServicePublishRequest,
    session: Session = Depends(get_session),
):
    """Remove service/section pairs"""
    return _unpublish(session, SERVICES, request.service_ids, request.section_ids)


# ============================================================================
# Ordered full replace of one section
# ============================================================================


@router.post("/catalog/product-mappings", response_model=MappingsResponse)
def update_product_mappings(
    request: ProductMappingsRequest,
    session: Session = Depends(get_session),
    publisher_id: Optional[str] = Depends(get_requestor_id),
):
    """Set a section's products to exactly product_ids, in that order"""
    return _update_mappings(session, PRODUCTS, request.section_id, request.product_ids, publisher_id)


@router.post("/catalog/service-mappings", response_model=MappingsResponse)
def update_service_mappings(
    request: ServiceMappingsRequest,
    session: Session = Depends(get_session),
    publisher_id: Optional[str] = Depends(get_requestor_id),
):
    """Set a section's services to exactly service_ids, in that order"""
    return _update_mappings(session, SERVICES, request.section_id, request.service_ids, publisher_id)


# ============================================================================
# Read side
# ============================================================================


@router.get("/catalog/fetchpublishingproducts")
def fetch_publishing_products(session: Session = Depends(get_session)):
    """Active products with the sections they are published into"""
    return envelope(True, "Publishing products fetched successfully", data=fetch_publishing_items(session, PRODUCTS))


@router.get("/catalog/fetchpublishingservices")
def fetch_publishing_services(session: Session = Depends(get_session)):
    """In-production services with the sections they are published into"""
    return envelope(True, "Publishing services fetched successfully", data=fetch_publishing_items(session, SERVICES))


@router.get("/catalog/sections/{section_id}/products")
def get_section_products(section_id: int, session: Session = Depends(get_session)):
    """A section's products in position order"""
    items = fetch_section_items(session, PRODUCTS, section_id)
    if items is None:
        raise NotFoundError(f"Section {section_id} not found")
    return envelope(True, "Section products fetched successfully", data=items)


@router.get("/catalog/sections/{section_id}/services")
def get_section_services(section_id: int, session: Session = Depends(get_session)):
    """A section's services in position order"""
    items = fetch_section_items(session, SERVICES, section_id)
    if items is None:
        raise NotFoundError(f"Section {section_id} not found")
    return envelope(True, "Section services fetched successfully", data=items)
