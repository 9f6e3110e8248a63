"""
Ordered mapping mutations.

Positions are 0-based and dense within one section for each item kind:
- append: a new mapping goes to max(position) + 1 in its section
- remove: every mapping above a deleted one moves down by one
- replace: a section's list is rewritten as 0..n-1 in the given order

Nothing here commits; callers own the transaction.
"""

from collections import defaultdict
from datetime import timezone
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func, update
from sqlmodel import Session, SQLModel, select

from backoffice.models.catalog_section import CatalogSection
from backoffice.services.mapping_resolver import Pair
from backoffice.services.publication_kinds import PublicationKind


def lock_containers(session: Session, section_ids: Iterable[int]) -> List[int]:
    """
    Row-lock the given sections for the rest of the transaction.

    Locks are taken in ascending id order. Dialects without FOR UPDATE
    (SQLite) render a plain SELECT; SQLite serializes writers anyway.
    """
    ids = sorted(set(section_ids))
    if not ids:
        return []
    return list(
        session.exec(
            select(CatalogSection.id).where(CatalogSection.id.in_(ids)).order_by(CatalogSection.id).with_for_update()
        ).all()
    )


def current_pairs(
    session: Session,
    kind: PublicationKind,
    item_ids: Optional[Sequence[int]] = None,
    section_ids: Optional[Sequence[int]] = None,
) -> List[Pair]:
    """Persisted (item_id, section_id) pairs, ordered by section then position."""
    mapping = kind.mapping_model
    stmt = select(kind.item_column, mapping.section_id)
    if item_ids is not None:
        stmt = stmt.where(kind.item_column.in_(list(item_ids)))
    if section_ids is not None:
        stmt = stmt.where(mapping.section_id.in_(list(section_ids)))
    stmt = stmt.order_by(mapping.section_id, mapping.position)
    return [(row[0], row[1]) for row in session.exec(stmt).all()]


def next_positions(session: Session, kind: PublicationKind, section_ids: Iterable[int]) -> Dict[int, int]:
    """Next free position per section (0 for a section with no mappings)."""
    mapping = kind.mapping_model
    ids = list(set(section_ids))
    rows = session.exec(
        select(mapping.section_id, func.max(mapping.position))
        .where(mapping.section_id.in_(ids))
        .group_by(mapping.section_id)
    ).all()
    positions = {section_id: 0 for section_id in ids}
    for section_id, max_position in rows:
        if max_position is not None:
            positions[section_id] = max_position + 1
    return positions


def append_mappings(
    session: Session, kind: PublicationKind, pairs: Sequence[Pair], published_by: Optional[str] = None
) -> List[SQLModel]:
    """
    Insert new mappings at the end of their sections.

    Pairs must not already exist (see mapping_resolver). Within one section,
    positions are handed out in the order the pairs are given.
    """
    if not pairs:
        return []

    positions = next_positions(session, kind, (section_id for _, section_id in pairs))
    rows = []
    for item_id, section_id in pairs:
        rows.append(kind.new_mapping(item_id, section_id, positions[section_id], published_by))
        positions[section_id] += 1

    session.add_all(rows)
    session.flush()
    return rows


def remove_mappings(session: Session, kind: PublicationKind, pairs: Sequence[Pair]) -> int:
    """
    Delete the exact pairs given and close the gaps they leave.

    Returns the number of mappings actually removed; pairs that do not exist
    are skipped.
    """
    if not pairs:
        return 0

    mapping = kind.mapping_model
    wanted = set(pairs)
    candidates = session.exec(
        select(mapping).where(
            mapping.section_id.in_(list({section_id for _, section_id in wanted})),
            kind.item_column.in_(list({item_id for item_id, _ in wanted})),
        )
    ).all()
    doomed = [row for row in candidates if (kind.item_id_of(row), row.section_id) in wanted]
    if not doomed:
        return 0

    vacated: Dict[int, List[int]] = defaultdict(list)
    for row in doomed:
        vacated[row.section_id].append(row.position)
        session.delete(row)
    session.flush()

    # Highest position first so lower vacated positions stay valid
    for section_id, positions in vacated.items():
        for position in sorted(positions, reverse=True):
            session.execute(
                update(mapping)
                .where(mapping.section_id == section_id, mapping.position > position)
                .values(position=mapping.position - 1)
            )

    return len(doomed)


def replace_container(
    session: Session,
    kind: PublicationKind,
    section_id: int,
    item_ids: Sequence[int],
    published_by: Optional[str] = None,
) -> List[SQLModel]:
    """
    Rewrite one section's mapping list as exactly item_ids, positions 0..n-1.

    Items that were already mapped keep their original publisher and
    publication time.
    """
    mapping = kind.mapping_model
    previous = {
        kind.item_id_of(row): (row.published_by, row.published_at)
        for row in session.exec(select(mapping).where(mapping.section_id == section_id)).all()
    }

    session.execute(delete(mapping).where(mapping.section_id == section_id))

    rows = []
    for position, item_id in enumerate(item_ids):
        row = kind.new_mapping(item_id, section_id, position, published_by)
        if item_id in previous:
            kept_by, kept_at = previous[item_id]
            # SQLite hands stored datetimes back without tzinfo
            if kept_at is not None and kept_at.tzinfo is None:
                kept_at = kept_at.replace(tzinfo=timezone.utc)
            row.published_by, row.published_at = kept_by, kept_at
        rows.append(row)

    session.add_all(rows)
    session.flush()
    return rows


def recompute_published_flags(session: Session, kind: PublicationKind, item_ids: Iterable[int]) -> None:
    """Set is_published = (item has at least one mapping) for the given items."""
    ids = list(set(item_ids))
    if not ids:
        return

    item = kind.item_model
    has_mapping = select(kind.mapping_model.id).where(kind.item_column == item.id).correlate(item).exists()
    session.execute(
        update(item)
        .where(item.id.in_(ids))
        .values(is_published=has_mapping)
        .execution_options(synchronize_session="fetch")
    )
