"""
Catalog publishing endpoint tests.

Validates:
- Publishing requires a requestor id (401 without one)
- A batch with one non-active product is rejected whole (400, invalidIds)
- Publish/unpublish counts and idempotence over HTTP
- Full replace of a section's product list keeps positions 0..n-1
- Publisher grid and section listing read endpoints
"""

from sqlmodel import Session, select

from backoffice.models.product import Product
from backoffice.models.section_product import SectionProduct
from backoffice.models.section_service import SectionService
from tests.conftest import REQUESTOR, make_product, make_section, make_service


def _section_rows(session: Session, section_id: int):
    session.expire_all()
    rows = session.exec(
        select(SectionProduct).where(SectionProduct.section_id == section_id).order_by(SectionProduct.position)
    ).all()
    return [(r.product_id, r.position) for r in rows]


# ============================================================================
# Publish / Unpublish
# ============================================================================


def test_publish_without_requestor_returns_401(client, session):
    """No X-Requestor-Id header means no publication."""
    p = make_product(session, "P1")
    s = make_section(session, "Tiles", 1)

    resp = client.post("/api/admin/catalog/product-publish", json={"product_ids": [p.id], "section_ids": [s.id]})

    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "User authentication required for publication"
    assert _section_rows(session, s.id) == []


def test_publish_checks_empty_ids_before_requestor(client, session):
    """An empty selection is reported as such even when no requestor is present."""
    s = make_section(session, "Tiles", 1)

    resp = client.post("/api/admin/catalog/product-publish", json={"product_ids": [], "section_ids": [s.id]})

    assert resp.status_code == 400
    assert resp.json()["message"] == "product_ids is required and must not be empty"


def test_publish_products_success(client, session):
    p1, p2 = make_product(session, "P1"), make_product(session, "P2")
    s = make_section(session, "Tiles", 1)

    resp = client.post(
        "/api/admin/catalog/product-publish",
        json={"product_ids": [p1.id, p2.id], "section_ids": [s.id]},
        headers=REQUESTOR,
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Products published successfully",
        "addedCount": 2,
        "updatedCount": 0,
    }
    assert _section_rows(session, s.id) == [(p1.id, 0), (p2.id, 1)]
    mapping = session.exec(select(SectionProduct).where(SectionProduct.product_id == p1.id)).one()
    assert mapping.published_by == "admin-1"
    assert session.get(Product, p1.id).is_published is True


def test_publish_twice_reports_updated(client, session):
    p = make_product(session, "P1")
    s = make_section(session, "Tiles", 1)
    payload = {"product_ids": [p.id], "section_ids": [s.id]}

    client.post("/api/admin/catalog/product-publish", json=payload, headers=REQUESTOR)
    resp = client.post("/api/admin/catalog/product-publish", json=payload, headers=REQUESTOR)

    assert resp.status_code == 200
    assert resp.json()["addedCount"] == 0
    assert resp.json()["updatedCount"] == 1
    assert _section_rows(session, s.id) == [(p.id, 0)]


def test_publish_with_inactive_product_is_rejected_whole(client, session):
    """One draft product in the batch: 400, and the active one is not published either."""
    p1 = make_product(session, "p1", status="active")
    p2 = make_product(session, "p2", status="draft")
    s1 = make_section(session, "s1", 1)

    resp = client.post(
        "/api/admin/catalog/product-publish",
        json={"product_ids": [p1.id, p2.id], "section_ids": [s1.id]},
        headers=REQUESTOR,
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == f"Some products are not active: {p2.id}"
    assert body["invalidIds"] == [p2.id]
    assert body["addedCount"] == 0
    assert _section_rows(session, s1.id) == []
    assert session.get(Product, p1.id).is_published is False


def test_publish_with_empty_ids_returns_400(client, session):
    s = make_section(session, "Tiles", 1)

    resp = client.post(
        "/api/admin/catalog/product-publish",
        json={"product_ids": [], "section_ids": [s.id]},
        headers=REQUESTOR,
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == "product_ids is required and must not be empty"


def test_unpublish_compacts_positions(client, session):
    a, b, c = (make_product(session, code) for code in ("A", "B", "C"))
    s = make_section(session, "Tiles", 1)
    client.post(
        "/api/admin/catalog/product-publish",
        json={"product_ids": [a.id, b.id, c.id], "section_ids": [s.id]},
        headers=REQUESTOR,
    )

    resp = client.post("/api/admin/catalog/product-unpublish", json={"product_ids": [b.id], "section_ids": [s.id]})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Products unpublished successfully", "removedCount": 1}
    assert _section_rows(session, s.id) == [(a.id, 0), (c.id, 1)]
    assert session.get(Product, b.id).is_published is False


def test_service_publish_and_unpublish(client, session):
    svc = make_service(session, "Installation")
    s = make_section(session, "Services", 1)
    payload = {"service_ids": [svc.id], "section_ids": [s.id]}

    pub = client.post("/api/admin/catalog/service-publish", json=payload, headers=REQUESTOR)
    assert pub.status_code == 200
    assert pub.json()["addedCount"] == 1
    session.expire_all()
    assert len(session.exec(select(SectionService)).all()) == 1

    unpub = client.post("/api/admin/catalog/service-unpublish", json=payload)
    assert unpub.status_code == 200
    assert unpub.json()["removedCount"] == 1
    session.expire_all()
    assert session.exec(select(SectionService)).all() == []


def test_service_publish_rejects_draft_service(client, session):
    svc = make_service(session, "Consulting", status="draft")
    s = make_section(session, "Services", 1)

    resp = client.post(
        "/api/admin/catalog/service-publish",
        json={"service_ids": [svc.id], "section_ids": [s.id]},
        headers=REQUESTOR,
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == f"Some services are not active: {svc.id}"


# ============================================================================
# Section mappings (full replace)
# ============================================================================


def test_product_mappings_full_replace(client, session):
    a, b, c = (make_product(session, code) for code in ("A", "B", "C"))
    s1, s2 = make_section(session, "Tiles", 1), make_section(session, "Grout", 2)
    client.post(
        "/api/admin/catalog/product-publish",
        json={"product_ids": [b.id], "section_ids": [s2.id]},
        headers=REQUESTOR,
    )

    first = client.post(
        "/api/admin/catalog/product-mappings",
        json={"section_id": s1.id, "product_ids": [b.id, a.id, c.id]},
        headers=REQUESTOR,
    )
    assert first.status_code == 200
    assert first.json()["addedCount"] == 3
    assert _section_rows(session, s1.id) == [(b.id, 0), (a.id, 1), (c.id, 2)]

    second = client.post(
        "/api/admin/catalog/product-mappings",
        json={"section_id": s1.id, "product_ids": [a.id, c.id]},
        headers=REQUESTOR,
    )
    assert second.status_code == 200
    assert second.json() == {
        "success": True,
        "message": "Section products updated successfully",
        "addedCount": 0,
        "removedCount": 1,
    }
    assert _section_rows(session, s1.id) == [(a.id, 0), (c.id, 1)]
    assert _section_rows(session, s2.id) == [(b.id, 0)]


def test_product_mappings_unknown_section(client, session):
    a = make_product(session, "A")

    resp = client.post(
        "/api/admin/catalog/product-mappings",
        json={"section_id": 999, "product_ids": [a.id]},
        headers=REQUESTOR,
    )

    assert resp.status_code == 400
    assert resp.json()["invalidIds"] == [999]


# ============================================================================
# Read side
# ============================================================================


def test_fetch_publishing_products(client, session):
    active = make_product(session, "A")
    make_product(session, "D", status="draft")
    s1, s2 = make_section(session, "Tiles", 1), make_section(session, "Grout", 2)
    client.post(
        "/api/admin/catalog/product-publish",
        json={"product_ids": [active.id], "section_ids": [s2.id]},
        headers=REQUESTOR,
    )

    resp = client.get("/api/admin/catalog/fetchpublishingproducts")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [item["id"] for item in data["items"]] == [active.id]
    item = data["items"][0]
    assert item["published"] is True
    assert item["sections"] == [{"id": s2.id, "name": "Grout", "status": "active", "position": 0}]
    assert [section["id"] for section in data["sections"]] == [s1.id, s2.id]


def test_fetch_publishing_services_empty(client, session):
    make_service(session, "Consulting", status="draft")

    resp = client.get("/api/admin/catalog/fetchpublishingservices")

    assert resp.status_code == 200
    assert resp.json()["data"] == {"items": [], "sections": []}


def test_section_products_listing_in_position_order(client, session):
    a, b = make_product(session, "A"), make_product(session, "B")
    s = make_section(session, "Tiles", 1)
    client.post(
        "/api/admin/catalog/product-mappings",
        json={"section_id": s.id, "product_ids": [b.id, a.id]},
        headers=REQUESTOR,
    )

    resp = client.get(f"/api/admin/catalog/sections/{s.id}/products")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [(row["id"], row["position"]) for row in data] == [(b.id, 0), (a.id, 1)]
    assert data[0]["name"] == "B"
    assert data[0]["published_by"] == "admin-1"


def test_section_items_listing_unknown_section(client):
    resp = client.get("/api/admin/catalog/sections/404/services")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Section 404 not found"}
