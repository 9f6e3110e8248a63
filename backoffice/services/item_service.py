"""
Product and service CRUD.

Both item types share one implementation driven by their PublicationKind.
Deleting an item removes its mappings first so every section it was
published in stays gap-free.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from backoffice.events import ItemChange, ItemEvent, emit_event
from backoffice.exceptions import CatalogDatabaseError, ConflictError, EmptySelectionError, NotFoundError
from backoffice.services.entity_validator import unique_ids
from backoffice.services.ordered_mutator import current_pairs, lock_containers, remove_mappings
from backoffice.services.publication_kinds import PublicationKind

logger = logging.getLogger(__name__)


def list_items(session: Session, kind: PublicationKind, status: Optional[str] = None) -> List[SQLModel]:
    model = kind.item_model
    stmt = select(model)
    if status:
        stmt = stmt.where(model.status == status)
    return list(session.exec(stmt.order_by(getattr(model, kind.label_attr))).all())


def get_item_or_404(session: Session, kind: PublicationKind, item_id: int) -> SQLModel:
    item = session.get(kind.item_model, item_id)
    if not item:
        raise NotFoundError(f"{kind.name.capitalize()} {item_id} not found")
    return item


def _ensure_unique_label(session: Session, kind: PublicationKind, value: str, exclude_id: Optional[int] = None):
    model = kind.item_model
    stmt = select(model.id).where(getattr(model, kind.label_attr) == value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if session.exec(stmt).first() is not None:
        error = f"{kind.name.capitalize()} {kind.label_attr} '{value}' already exists"
        emit_event(ItemEvent.VALIDATION_ERROR, ItemChange(kind.name, [], error=error))
        raise ConflictError(error)


def create_item(session: Session, kind: PublicationKind, data: Dict) -> SQLModel:
    """
    Create a product/service. New items are never published.

    Raises:
        ConflictError: product_code / service name already used
        CatalogDatabaseError: database failure (rolled back)
    """
    _ensure_unique_label(session, kind, data[kind.label_attr])

    try:
        item = kind.item_model(**data, is_published=False)
        session.add(item)
        session.commit()
        session.refresh(item)
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("%s create failed, transaction rolled back", kind.name)
        emit_event(ItemEvent.DATABASE_ERROR, ItemChange(kind.name, [], error=str(e)))
        raise CatalogDatabaseError(f"Failed to create {kind.name}") from e

    emit_event(ItemEvent.CREATE_SUCCESS, ItemChange(kind.name, [item.id]))
    return item


def update_item(session: Session, kind: PublicationKind, item_id: int, changes: Dict) -> SQLModel:
    """
    Apply partial changes. A status change does not touch existing mappings.

    Raises:
        NotFoundError, ConflictError, CatalogDatabaseError
    """
    item = get_item_or_404(session, kind, item_id)
    if changes.get(kind.label_attr) is not None:
        _ensure_unique_label(session, kind, changes[kind.label_attr], exclude_id=item_id)

    try:
        for key, value in changes.items():
            setattr(item, key, value)
        item.updated_at = datetime.now(timezone.utc)
        session.add(item)
        session.commit()
        session.refresh(item)
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("%s %s update failed, transaction rolled back", kind.name, item_id)
        emit_event(ItemEvent.DATABASE_ERROR, ItemChange(kind.name, [item_id], error=str(e)))
        raise CatalogDatabaseError(f"Failed to update {kind.name}") from e

    emit_event(ItemEvent.UPDATE_SUCCESS, ItemChange(kind.name, [item.id]))
    return item


def delete_items(session: Session, kind: PublicationKind, item_ids: Sequence[int]) -> Dict:
    """
    Delete items by id, reporting per-id outcomes.

    Returns:
        {"deleted": [{"id", "name"}], "failed": [{"id", "error"}]}
    """
    if not item_ids:
        raise EmptySelectionError(f"{kind.name}_ids")
    ids = unique_ids(item_ids)
    model = kind.item_model

    found = {item.id: item for item in session.exec(select(model).where(model.id.in_(ids))).all()}
    failed = [
        {"id": item_id, "error": f"{kind.name.capitalize()} not found"} for item_id in ids if item_id not in found
    ]
    deleted = [
        {"id": item_id, "name": getattr(found[item_id], kind.label_attr)} for item_id in ids if item_id in found
    ]
    if not deleted:
        return {"deleted": [], "failed": failed}

    try:
        doomed = [entry["id"] for entry in deleted]
        pairs = current_pairs(session, kind, item_ids=doomed)
        lock_containers(session, [section_id for _, section_id in pairs])
        remove_mappings(session, kind, pairs)
        session.execute(delete(model).where(model.id.in_(doomed)))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("%s delete failed, transaction rolled back", kind.plural)
        emit_event(ItemEvent.DATABASE_ERROR, ItemChange(kind.name, ids, error=str(e)))
        raise CatalogDatabaseError(f"Failed to delete {kind.plural}") from e

    emit_event(ItemEvent.DELETE_SUCCESS, ItemChange(kind.name, [entry["id"] for entry in deleted]))
    return {"deleted": deleted, "failed": failed}
