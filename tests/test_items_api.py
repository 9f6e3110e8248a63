"""
Product and service endpoint tests.

Validates:
- CRUD with unique product_code / service name (409 on reuse)
- New items start unpublished; status changes keep publications
- Deleting an item closes the gaps it leaves in its sections
- update-sections-publish replaces an item's section set
"""

from sqlmodel import Session, select

from backoffice.models.product import Product
from backoffice.models.section_product import SectionProduct
from backoffice.models.section_service import SectionService
from backoffice.services.publication_kinds import PRODUCTS
from backoffice.services.publication_service import PublicationService
from tests.conftest import REQUESTOR, make_product, make_section, make_service


def _positions(session: Session, section_id: int):
    session.expire_all()
    rows = session.exec(
        select(SectionProduct).where(SectionProduct.section_id == section_id).order_by(SectionProduct.position)
    ).all()
    return [(r.product_id, r.position) for r in rows]


# ============================================================================
# Products
# ============================================================================


def test_create_product(client):
    resp = client.post("/api/admin/products", json={"product_code": " TL-100 ", "name": "Tile", "status": "active"})

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["product_code"] == "TL-100"
    assert data["status"] == "active"
    assert data["is_published"] is False


def test_create_product_duplicate_code(client, session):
    make_product(session, "TL-100")

    resp = client.post("/api/admin/products", json={"product_code": "TL-100", "name": "Other"})

    assert resp.status_code == 409
    assert resp.json()["message"] == "Product product_code 'TL-100' already exists"


def test_create_product_blank_name_is_422(client):
    resp = client.post("/api/admin/products", json={"product_code": "X", "name": "  "})

    assert resp.status_code == 422


def test_update_product_rejects_blank_values(client, session):
    p = make_product(session, "TL-100")
    product_id = p.id

    blank_code = client.put(f"/api/admin/products/{product_id}", json={"product_code": ""})
    blank_name = client.put(f"/api/admin/products/{product_id}", json={"name": "   "})
    renamed = client.put(f"/api/admin/products/{product_id}", json={"name": " Floor Tile "})

    assert blank_code.status_code == 422
    assert blank_name.status_code == 422
    assert renamed.status_code == 200
    assert renamed.json()["data"]["name"] == "Floor Tile"
    assert renamed.json()["data"]["product_code"] == "TL-100"


def test_update_service_rejects_blank_name(client, session):
    svc = make_service(session, "Installation")

    resp = client.put(f"/api/admin/services/{svc.id}", json={"name": " "})

    assert resp.status_code == 422


def test_list_products_filtered_by_status(client, session):
    make_product(session, "A")
    make_product(session, "B", status="draft")

    everything = client.get("/api/admin/products")
    drafts = client.get("/api/admin/products", params={"status": "draft"})

    assert [p["product_code"] for p in everything.json()["data"]] == ["A", "B"]
    assert [p["product_code"] for p in drafts.json()["data"]] == ["B"]


def test_get_product_not_found(client):
    resp = client.get("/api/admin/products/42")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Product 42 not found"


def test_status_change_keeps_publications(client, session):
    p = make_product(session, "A")
    s = make_section(session, "Tiles", 1)
    PublicationService(session, PRODUCTS).publish([p.id], [s.id], "admin-1")

    resp = client.put(f"/api/admin/products/{p.id}", json={"status": "archived"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "archived"
    assert data["is_published"] is True
    assert _positions(session, s.id) == [(p.id, 0)]


def test_delete_products_compacts_sections(client, session):
    a, b, c = (make_product(session, code) for code in ("A", "B", "C"))
    s1, s2 = make_section(session, "Tiles", 1), make_section(session, "Grout", 2)
    PublicationService(session, PRODUCTS).publish([a.id, b.id, c.id], [s1.id], "admin-1")
    PublicationService(session, PRODUCTS).publish([c.id, a.id], [s2.id], "admin-1")
    a_id = a.id

    resp = client.post("/api/admin/products/delete", json={"product_ids": [a_id]})

    assert resp.status_code == 200
    assert resp.json()["data"]["deleted"] == [{"id": a_id, "name": "A"}]
    assert _positions(session, s1.id) == [(b.id, 0), (c.id, 1)]
    assert _positions(session, s2.id) == [(c.id, 0)]
    assert session.exec(select(Product).where(Product.id == a_id)).first() is None


def test_delete_products_partial_and_none(client, session):
    p = make_product(session, "A")

    partial = client.post("/api/admin/products/delete", json={"product_ids": [p.id, 77]})
    none = client.post("/api/admin/products/delete", json={"product_ids": [77]})

    assert partial.status_code == 200
    assert partial.json()["message"] == "1 of 2 products deleted"
    assert none.status_code == 400
    assert none.json()["data"]["failed"] == [{"id": 77, "error": "Product not found"}]


def test_update_product_sections_publish(client, session):
    p = make_product(session, "A")
    s1, s2 = make_section(session, "Tiles", 1), make_section(session, "Grout", 2)
    PublicationService(session, PRODUCTS).publish([p.id], [s1.id], "admin-1")

    resp = client.post(
        "/api/admin/products/update-sections-publish",
        json={"product_id": p.id, "section_ids": [s2.id]},
        headers=REQUESTOR,
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Product sections publish mappings updated",
        "addedCount": 1,
        "removedCount": 1,
        "updatedCount": 0,
    }
    assert _positions(session, s1.id) == []
    assert _positions(session, s2.id) == [(p.id, 0)]


def test_update_product_sections_publish_requires_requestor(client, session):
    p = make_product(session, "A")

    resp = client.post("/api/admin/products/update-sections-publish", json={"product_id": p.id, "section_ids": []})

    assert resp.status_code == 401


def test_update_product_sections_publish_draft_product(client, session):
    p = make_product(session, "A", status="draft")
    s = make_section(session, "Tiles", 1)

    resp = client.post(
        "/api/admin/products/update-sections-publish",
        json={"product_id": p.id, "section_ids": [s.id]},
        headers=REQUESTOR,
    )

    assert resp.status_code == 400
    assert resp.json()["invalidIds"] == [p.id]


# ============================================================================
# Services
# ============================================================================


def test_service_crud(client):
    created = client.post(
        "/api/admin/services", json={"name": "Installation", "description": "On-site", "status": "in_production"}
    )
    assert created.status_code == 201
    service_id = created.json()["data"]["id"]

    updated = client.put(f"/api/admin/services/{service_id}", json={"description": "Remote"})
    assert updated.json()["data"]["description"] == "Remote"

    duplicate = client.post("/api/admin/services", json={"name": "Installation"})
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "Service name 'Installation' already exists"

    deleted = client.post("/api/admin/services/delete", json={"service_ids": [service_id]})
    assert deleted.json()["message"] == "Services deleted successfully"
    assert client.get(f"/api/admin/services/{service_id}").status_code == 404


def test_update_service_sections_publish(client, session):
    svc = make_service(session, "Installation")
    s1, s2 = make_section(session, "Services", 1), make_section(session, "Extras", 2)

    resp = client.post(
        "/api/admin/services/update-sections-publish",
        json={"service_id": svc.id, "section_ids": [s1.id, s2.id]},
        headers=REQUESTOR,
    )

    assert resp.status_code == 200
    assert resp.json()["addedCount"] == 2
    session.expire_all()
    rows = session.exec(select(SectionService).order_by(SectionService.section_id)).all()
    assert [(r.section_id, r.position) for r in rows] == [(s1.id, 0), (s2.id, 0)]
