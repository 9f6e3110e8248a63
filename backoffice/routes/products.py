"""
API Routes for products
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session

from backoffice.database import get_session
from backoffice.models.product import ProductStatus
from backoffice.services import item_service
from backoffice.services.publication_kinds import PRODUCTS
from backoffice.services.publication_service import PublicationService
from backoffice.utils.http import envelope, failure_response, get_requestor_id

router = APIRouter()


class ProductCreate(BaseModel):
    product_code: str
    name: str
    status: ProductStatus = ProductStatus.draft

    @field_validator("product_code", "name")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ProductUpdate(BaseModel):
    product_code: Optional[str] = None
    name: Optional[str] = None
    status: Optional[ProductStatus] = None

    @field_validator("product_code", "name")
    @classmethod
    def validate_not_blank(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_code: str
    name: str
    status: ProductStatus
    is_published: bool
    created_at: datetime
    updated_at: datetime


class ProductsDeleteRequest(BaseModel):
    product_ids: List[int] = []


class ProductSectionsPublishRequest(BaseModel):
    product_id: int
    section_ids: List[int] = []


def _dump(product) -> dict:
    return ProductResponse.model_validate(product).model_dump(mode="json")


@router.get("/products")
def list_products(status: Optional[ProductStatus] = Query(None), session: Session = Depends(get_session)):
    products = item_service.list_items(session, PRODUCTS, status.value if status else None)
    return envelope(True, "Products fetched successfully", data=[_dump(p) for p in products])


@router.get("/products/{product_id}")
def get_product(product_id: int, session: Session = Depends(get_session)):
    product = item_service.get_item_or_404(session, PRODUCTS, product_id)
    return envelope(True, "Product fetched successfully", data=_dump(product))


@router.post("/products", status_code=201)
def create_product(product_data: ProductCreate, session: Session = Depends(get_session)):
    data = product_data.model_dump()
    data["status"] = product_data.status.value
    product = item_service.create_item(session, PRODUCTS, data)
    return envelope(True, "Product created successfully", data=_dump(product))


@router.put("/products/{product_id}")
def update_product(product_id: int, product_data: ProductUpdate, session: Session = Depends(get_session)):
    """Update product fields; changing status keeps existing publications"""
    changes = product_data.model_dump(exclude_unset=True, exclude_none=True)
    if "status" in changes:
        changes["status"] = product_data.status.value
    product = item_service.update_item(session, PRODUCTS, product_id, changes)
    return envelope(True, "Product updated successfully", data=_dump(product))


@router.post("/products/delete")
def delete_products(request: ProductsDeleteRequest, session: Session = Depends(get_session)):
    """Delete products and their section mappings; unknown ids are reported per id"""
    outcome = item_service.delete_items(session, PRODUCTS, request.product_ids)
    deleted, failed = len(outcome["deleted"]), len(outcome["failed"])
    if not deleted:
        return failure_response(400, "No products were deleted", data=outcome)
    message = f"{deleted} of {deleted + failed} products deleted" if failed else "Products deleted successfully"
    return envelope(True, message, data=outcome)


@router.post("/products/update-sections-publish")
def update_product_sections_publish(
    request: ProductSectionsPublishRequest,
    session: Session = Depends(get_session),
    publisher_id: Optional[str] = Depends(get_requestor_id),
):
    """Set the sections a product is published into to exactly section_ids"""
    result = PublicationService(session, PRODUCTS).update_item_sections(
        request.product_id, request.section_ids, publisher_id
    )
    counts = {"addedCount": result.added, "removedCount": result.removed, "updatedCount": result.updated}
    if not result.success:
        return failure_response(400, result.message, invalidIds=result.invalid_ids, **{k: 0 for k in counts})
    return envelope(True, result.message, **counts)
