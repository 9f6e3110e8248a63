"""
API Routes for services
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session

from backoffice.database import get_session
from backoffice.models.service import ServiceStatus
from backoffice.services import item_service
from backoffice.services.publication_kinds import SERVICES
from backoffice.services.publication_service import PublicationService
from backoffice.utils.http import envelope, failure_response, get_requestor_id

router = APIRouter()


class ServiceCreate(BaseModel):
    name: str
    description: Optional[str] = None
    status: ServiceStatus = ServiceStatus.draft

    @field_validator("name")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ServiceStatus] = None

    @field_validator("name")
    @classmethod
    def validate_not_blank(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    status: ServiceStatus
    is_published: bool
    created_at: datetime
    updated_at: datetime


class ServicesDeleteRequest(BaseModel):
    service_ids: List[int] = []


class ServiceSectionsPublishRequest(BaseModel):
    service_id: int
    section_ids: List[int] = []


def _dump(service) -> dict:
    return ServiceResponse.model_validate(service).model_dump(mode="json")


@router.get("/services")
def list_services(status: Optional[ServiceStatus] = Query(None), session: Session = Depends(get_session)):
    services = item_service.list_items(session, SERVICES, status.value if status else None)
    return envelope(True, "Services fetched successfully", data=[_dump(s) for s in services])


@router.get("/services/{service_id}")
def get_service(service_id: int, session: Session = Depends(get_session)):
    service = item_service.get_item_or_404(session, SERVICES, service_id)
    return envelope(True, "Service fetched successfully", data=_dump(service))


@router.post("/services", status_code=201)
def create_service(service_data: ServiceCreate, session: Session = Depends(get_session)):
    data = service_data.model_dump()
    data["status"] = service_data.status.value
    service = item_service.create_item(session, SERVICES, data)
    return envelope(True, "Service created successfully", data=_dump(service))


@router.put("/services/{service_id}")
def update_service(service_id: int, service_data: ServiceUpdate, session: Session = Depends(get_session)):
    """Update service fields; changing status keeps existing publications"""
    changes = service_data.model_dump(exclude_unset=True, exclude_none=True)
    if "status" in changes:
        changes["status"] = service_data.status.value
    service = item_service.update_item(session, SERVICES, service_id, changes)
    return envelope(True, "Service updated successfully", data=_dump(service))


@router.post("/services/delete")
def delete_services(request: ServicesDeleteRequest, session: Session = Depends(get_session)):
    """Delete services and their section mappings; unknown ids are reported per id"""
    outcome = item_service.delete_items(session, SERVICES, request.service_ids)
    deleted, failed = len(outcome["deleted"]), len(outcome["failed"])
    if not deleted:
        return failure_response(400, "No services were deleted", data=outcome)
    message = f"{deleted} of {deleted + failed} services deleted" if failed else "Services deleted successfully"
    return envelope(True, message, data=outcome)


@router.post("/services/update-sections-publish")
def update_service_sections_publish(
    request: ServiceSectionsPublishRequest,
    session: Session = Depends(get_session),
    publisher_id: Optional[str] = Depends(get_requestor_id),
):
    """Set the sections a service is published into to exactly section_ids"""
    result = PublicationService(session, SERVICES).update_item_sections(
        request.service_id, request.section_ids, publisher_id
    )
    counts = {"addedCount": result.added, "removedCount": result.removed, "updatedCount": result.updated}
    if not result.success:
        return failure_response(400, result.message, invalidIds=result.invalid_ids, **{k: 0 for k in counts})
    return envelope(True, result.message, **counts)
