"""
Catalog section management with gap-free ordering.

Section "order" is 1-based and dense across all sections:
- create at order o shifts sections at >= o up by one
- moving a section shifts the sections between its old and new order
- deleting sections renumbers the remainder 1..n
Deleting a section also removes its product/service mappings and refreshes
the publication flag of every item that lost one.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from backoffice.events import SectionChange, SectionEvent, emit_event
from backoffice.exceptions import CatalogDatabaseError, ConflictError, EmptySelectionError, NotFoundError
from backoffice.models.catalog_section import CatalogSection
from backoffice.services.entity_validator import unique_ids
from backoffice.services.ordered_mutator import recompute_published_flags
from backoffice.services.publication_kinds import ALL_KINDS
from backoffice.utils.sql import scalar_int

logger = logging.getLogger(__name__)


def list_sections(session: Session) -> List[CatalogSection]:
    return list(session.exec(select(CatalogSection).order_by(CatalogSection.order, CatalogSection.name)).all())


def get_section_or_404(session: Session, section_id: int) -> CatalogSection:
    section = session.get(CatalogSection, section_id)
    if not section:
        raise NotFoundError(f"Section {section_id} not found")
    return section


def _section_count(session: Session) -> int:
    return scalar_int(session.exec(select(func.count(CatalogSection.id))).one())


def _ensure_unique_name(session: Session, name: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(CatalogSection.id).where(CatalogSection.name == name)
    if exclude_id is not None:
        stmt = stmt.where(CatalogSection.id != exclude_id)
    if session.exec(stmt).first() is not None:
        raise ConflictError(f"Section name '{name}' already exists")


def _shift_orders(session: Session, lower: int, upper: Optional[int], step: int) -> None:
    """Add step to the order of every section with lower <= order <= upper."""
    criteria = [CatalogSection.order >= lower]
    if upper is not None:
        criteria.append(CatalogSection.order <= upper)
    session.execute(update(CatalogSection).where(*criteria).values(order=CatalogSection.order + step))


def create_section(session: Session, data: Dict, requestor_id: Optional[str] = None) -> CatalogSection:
    """
    Create a section at data["order"], clamped to 1..n+1.

    Raises:
        ConflictError: name already used
        CatalogDatabaseError: database failure (rolled back)
    """
    name = data["name"].strip()
    try:
        _ensure_unique_name(session, name)
    except ConflictError as e:
        emit_event(SectionEvent.CREATE_VALIDATION_ERROR, SectionChange([], [name], requestor_id, error=e.message))
        raise

    try:
        order = min(max(int(data["order"]), 1), _section_count(session) + 1)
        _shift_orders(session, order, None, 1)

        section = CatalogSection(
            **{**data, "name": name, "order": order},
            created_by=requestor_id,
        )
        session.add(section)
        session.commit()
        session.refresh(section)
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Section create failed, transaction rolled back")
        emit_event(SectionEvent.DATABASE_ERROR, SectionChange([], [name], requestor_id, error=str(e)))
        raise CatalogDatabaseError("Failed to create section") from e

    emit_event(SectionEvent.CREATE_SUCCESS, SectionChange([section.id], [section.name], requestor_id))
    return section


def update_section(
    session: Session, section_id: int, changes: Dict, requestor_id: Optional[str] = None
) -> CatalogSection:
    """
    Apply partial changes to a section; a new order is clamped to 1..n.

    Raises:
        NotFoundError, ConflictError, CatalogDatabaseError
    """
    section = get_section_or_404(session, section_id)

    if changes.get("name") is not None:
        changes["name"] = changes["name"].strip()
        try:
            _ensure_unique_name(session, changes["name"], exclude_id=section_id)
        except ConflictError as e:
            emit_event(
                SectionEvent.UPDATE_VALIDATION_ERROR,
                SectionChange([section_id], [changes["name"]], requestor_id, error=e.message),
            )
            raise

    try:
        new_order = changes.pop("order", None)
        if new_order is not None:
            move_section(session, section, int(new_order))

        for key, value in changes.items():
            setattr(section, key, value)
        section.modified_by = requestor_id
        section.modified_at = datetime.now(timezone.utc)

        session.add(section)
        session.commit()
        session.refresh(section)
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Section %s update failed, transaction rolled back", section_id)
        emit_event(SectionEvent.DATABASE_ERROR, SectionChange([section_id], [], requestor_id, error=str(e)))
        raise CatalogDatabaseError("Failed to update section") from e

    emit_event(SectionEvent.UPDATE_SUCCESS, SectionChange([section.id], [section.name], requestor_id))
    return section


def move_section(session: Session, section: CatalogSection, new_order: int) -> None:
    """Move section to new_order (clamped), shifting the sections in between. Does not commit."""
    new_order = min(max(new_order, 1), _section_count(session))
    old_order = section.order
    if new_order == old_order:
        return

    if new_order < old_order:
        _shift_orders(session, new_order, old_order - 1, 1)
    else:
        _shift_orders(session, old_order + 1, new_order, -1)
    section.order = new_order


def renumber_sections(session: Session) -> None:
    """Rewrite section orders as 1..n following the current order. Does not commit."""
    for index, section in enumerate(list_sections(session), start=1):
        if section.order != index:
            section.order = index
            session.add(section)
    session.flush()


def delete_sections(session: Session, section_ids: Sequence[int], requestor_id: Optional[str] = None) -> Dict:
    """
    Delete sections by id, reporting per-id outcomes.

    Unknown ids are reported in "failed"; the existing ones are deleted in one
    transaction together with their mappings.

    Returns:
        {"deleted": [{"id", "name"}], "failed": [{"id", "error"}]}
    """
    if not section_ids:
        raise EmptySelectionError("section_ids")
    ids = unique_ids(section_ids)

    found = {
        section.id: section
        for section in session.exec(select(CatalogSection).where(CatalogSection.id.in_(ids))).all()
    }
    failed = [{"id": section_id, "error": "Section not found"} for section_id in ids if section_id not in found]
    deleted = [{"id": section_id, "name": found[section_id].name} for section_id in ids if section_id in found]
    if not deleted:
        return {"deleted": [], "failed": failed}

    try:
        doomed = [entry["id"] for entry in deleted]
        for kind in ALL_KINDS:
            mapping = kind.mapping_model
            affected = session.exec(
                select(kind.item_column).where(mapping.section_id.in_(doomed)).distinct()
            ).all()
            session.execute(delete(mapping).where(mapping.section_id.in_(doomed)))
            recompute_published_flags(session, kind, affected)

        session.execute(delete(CatalogSection).where(CatalogSection.id.in_(doomed)))
        renumber_sections(session)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Section delete failed, transaction rolled back")
        emit_event(SectionEvent.DATABASE_ERROR, SectionChange(ids, [], requestor_id, error=str(e)))
        raise CatalogDatabaseError("Failed to delete sections") from e

    emit_event(
        SectionEvent.DELETE_SUCCESS,
        SectionChange([entry["id"] for entry in deleted], [entry["name"] for entry in deleted], requestor_id),
    )
    return {"deleted": deleted, "failed": failed}
