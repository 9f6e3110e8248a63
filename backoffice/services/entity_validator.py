"""
Entity existence validation for publication requests.

Read-only checks run inside the caller's transaction before any mapping is
touched. Any rejected id fails the whole batch.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from sqlmodel import Session, select

from backoffice.exceptions import EmptySelectionError
from backoffice.models.catalog_section import CatalogSection
from backoffice.services.publication_kinds import PublicationKind


def unique_ids(ids: Iterable[int]) -> List[int]:
    """Drop repeated ids, keeping the first occurrence."""
    seen = set()
    result = []
    for value in ids:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


@dataclass
class ContainerValidation:
    existing: List[int] = field(default_factory=list)
    rejected: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected


@dataclass
class ItemValidation:
    existing: List[int] = field(default_factory=list)
    rejected: List[int] = field(default_factory=list)
    eligible: List[int] = field(default_factory=list)
    ineligible: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected


def require_ids(ids: Sequence[int], field_name: str) -> List[int]:
    """Raise EmptySelectionError for a missing/empty list, else return it deduplicated."""
    if not ids:
        raise EmptySelectionError(field_name)
    return unique_ids(ids)


def validate_items(session: Session, kind: PublicationKind, ids: Sequence[int]) -> ItemValidation:
    """
    Check which item ids exist and which satisfy the kind's publish status.

    Results keep the caller's order; duplicates are reported once.
    """
    ids = require_ids(ids, f"{kind.name}_ids")
    model = kind.item_model
    rows = session.exec(select(model.id, model.status).where(model.id.in_(ids))).all()
    status_by_id = {row[0]: row[1] for row in rows}

    outcome = ItemValidation()
    for item_id in ids:
        if item_id not in status_by_id:
            outcome.rejected.append(item_id)
            continue
        outcome.existing.append(item_id)
        if status_by_id[item_id] == kind.eligible_status:
            outcome.eligible.append(item_id)
        else:
            outcome.ineligible.append(item_id)
    return outcome


def validate_containers(session: Session, ids: Sequence[int]) -> ContainerValidation:
    """Check which catalog section ids exist, in caller order."""
    ids = require_ids(ids, "section_ids")
    found = set(session.exec(select(CatalogSection.id).where(CatalogSection.id.in_(ids))).all())

    outcome = ContainerValidation()
    for section_id in ids:
        if section_id in found:
            outcome.existing.append(section_id)
        else:
            outcome.rejected.append(section_id)
    return outcome
