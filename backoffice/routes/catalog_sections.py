"""
API Routes for catalog sections
"""

import re
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Session

from backoffice.database import get_session
from backoffice.models.catalog_section import CatalogSection, SectionStatus
from backoffice.services import section_ordering
from backoffice.utils.http import envelope, failure_response, get_requestor_id

router = APIRouter()

HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


# ============================================================================
# Request/Response Models
# ============================================================================


def _check_color(v):
    if v is not None and not HEX_COLOR.match(v):
        raise ValueError("color must be a hex color like #1a2b3c")
    return v


class SectionCreate(BaseModel):
    name: str
    order: int = Field(..., ge=1)
    description: Optional[str] = None
    comments: Optional[str] = None
    status: SectionStatus = SectionStatus.draft
    is_public: bool = False
    icon: Optional[str] = None
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Section name is required")
        return v.strip()

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return _check_color(v)


class SectionUpdate(BaseModel):
    name: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    comments: Optional[str] = None
    status: Optional[SectionStatus] = None
    is_public: Optional[bool] = None
    icon: Optional[str] = None
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Section name must not be blank")
        return v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return _check_color(v)


class SectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    order: int
    description: Optional[str] = None
    comments: Optional[str] = None
    status: SectionStatus
    is_public: bool
    icon: Optional[str] = None
    color: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    modified_by: Optional[str] = None
    modified_at: Optional[datetime] = None


class SectionsDeleteRequest(BaseModel):
    section_ids: List[int] = []


def _dump(section: CatalogSection) -> dict:
    return SectionResponse.model_validate(section).model_dump(mode="json")


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/catalog/sections")
def list_sections(session: Session = Depends(get_session)):
    """All sections ordered by order, then name"""
    sections = section_ordering.list_sections(session)
    return envelope(True, "Sections fetched successfully", data=[_dump(s) for s in sections])


@router.get("/catalog/sections/{section_id}")
def get_section(section_id: int, session: Session = Depends(get_session)):
    section = section_ordering.get_section_or_404(session, section_id)
    return envelope(True, "Section fetched successfully", data=_dump(section))


@router.post("/catalog/sections", status_code=201)
def create_section(
    section_data: SectionCreate,
    session: Session = Depends(get_session),
    requestor_id: Optional[str] = Depends(get_requestor_id),
):
    """Create a section; sections at or after its order move down one place"""
    data = section_data.model_dump()
    data["status"] = section_data.status.value
    section = section_ordering.create_section(session, data, requestor_id)
    return envelope(True, "Section created successfully", data=_dump(section))


@router.put("/catalog/sections/{section_id}")
def update_section(
    section_id: int,
    section_data: SectionUpdate,
    session: Session = Depends(get_session),
    requestor_id: Optional[str] = Depends(get_requestor_id),
):
    """Update section fields; explicit nulls leave the stored value unchanged"""
    changes = section_data.model_dump(exclude_unset=True, exclude_none=True)
    if "status" in changes:
        changes["status"] = section_data.status.value
    section = section_ordering.update_section(session, section_id, changes, requestor_id)
    return envelope(True, "Section updated successfully", data=_dump(section))


@router.post("/catalog/sections/delete")
def delete_sections(
    request: SectionsDeleteRequest,
    session: Session = Depends(get_session),
    requestor_id: Optional[str] = Depends(get_requestor_id),
):
    """Delete sections with their mappings; unknown ids are reported per id"""
    outcome = section_ordering.delete_sections(session, request.section_ids, requestor_id)
    deleted, failed = len(outcome["deleted"]), len(outcome["failed"])
    if not deleted:
        return failure_response(400, "No sections were deleted", data=outcome)
    message = f"{deleted} of {deleted + failed} sections deleted" if failed else "Sections deleted successfully"
    return envelope(True, message, data=outcome)
