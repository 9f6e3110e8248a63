import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from backoffice.database import init_db
from backoffice.main import create_app
from backoffice.models.catalog_section import CatalogSection
from backoffice.models.product import Product, ProductStatus
from backoffice.models.service import Service, ServiceStatus

TEST_DATABASE_URL = "sqlite:///:memory:"

REQUESTOR = {"X-Requestor-Id": "admin-1"}


# ============================================================================
# Test Database Setup
# ============================================================================
# sqlite:///:memory: with StaticPool so the test session and the app's
# sessions share one connection; a fresh engine per test keeps tests isolated.


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(engine):
    """Test client whose app is composed around the test engine"""
    app = create_app(engine)
    with TestClient(app) as client:
        yield client


# ============================================================================
# Data helpers
# ============================================================================


def make_product(session: Session, code: str, status: str = ProductStatus.active.value) -> Product:
    product = Product(product_code=code, name=f"Product {code}", status=status)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def make_service(session: Session, name: str, status: str = ServiceStatus.in_production.value) -> Service:
    service = Service(name=name, status=status)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


def make_section(session: Session, name: str, order: int) -> CatalogSection:
    section = CatalogSection(name=name, order=order, status="active")
    session.add(section)
    session.commit()
    session.refresh(section)
    return section
