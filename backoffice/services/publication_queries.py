"""
Read side of catalog publishing: the data behind the admin publisher grid.
"""

from collections import defaultdict
from typing import Dict, List, Optional

from sqlmodel import Session, select

from backoffice.models.catalog_section import CatalogSection
from backoffice.services.publication_kinds import PublicationKind


def _section_dict(section: CatalogSection) -> Dict:
    return {"id": section.id, "name": section.name, "status": section.status, "order": section.order}


def fetch_publishing_items(session: Session, kind: PublicationKind) -> Dict:
    """
    All publishable items with the sections each is published into, plus all sections.

    Returns:
        {"items": [...], "sections": [...]} with sections ordered by order, name
    """
    item_model = kind.item_model
    mapping = kind.mapping_model
    label = getattr(item_model, kind.label_attr)

    items = session.exec(
        select(item_model).where(item_model.status == kind.eligible_status).order_by(label)
    ).all()
    sections = session.exec(select(CatalogSection).order_by(CatalogSection.order, CatalogSection.name)).all()
    sections_by_id = {section.id: section for section in sections}

    published_in: Dict[int, List[Dict]] = defaultdict(list)
    for row in session.exec(select(mapping).order_by(mapping.section_id, mapping.position)).all():
        section = sections_by_id.get(row.section_id)
        if section is None:
            continue
        published_in[kind.item_id_of(row)].append(
            {"id": section.id, "name": section.name, "status": section.status, "position": row.position}
        )

    return {
        "items": [
            {
                "id": item.id,
                "name": getattr(item, kind.label_attr),
                "status": item.status,
                "published": bool(published_in.get(item.id)),
                "sections": published_in.get(item.id, []),
            }
            for item in items
        ],
        "sections": [_section_dict(section) for section in sections],
    }


def fetch_section_items(session: Session, kind: PublicationKind, section_id: int) -> Optional[List[Dict]]:
    """One section's mappings in position order, or None if the section does not exist."""
    if session.get(CatalogSection, section_id) is None:
        return None

    item_model = kind.item_model
    mapping = kind.mapping_model
    rows = session.exec(
        select(mapping, item_model)
        .join(item_model, kind.item_column == item_model.id)
        .where(mapping.section_id == section_id)
        .order_by(mapping.position)
    ).all()

    return [
        {
            "id": item.id,
            "name": getattr(item, kind.label_attr),
            "status": item.status,
            "position": row.position,
            "published_by": row.published_by,
            "published_at": row.published_at.isoformat() if row.published_at else None,
        }
        for row, item in rows
    ]
