import os
from pathlib import Path
from typing import Generator, Optional

from dotenv import load_dotenv
from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./backoffice.db"


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """Build the engine for the composition root.

    Falls back to DATABASE_URL / SQL_ECHO from the environment.
    """
    url = database_url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

    if is_sqlite and ":memory:" not in url:
        db_path = url.replace("sqlite:///", "", 1)
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, echo=echo, connect_args=connect_args)


def get_session(request: Request) -> Generator[Session, None, None]:
    """Get database session bound to the application's engine"""
    with Session(request.app.state.engine) as session:
        yield session


def init_db(engine: Engine) -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from backoffice.models.catalog_section import CatalogSection  # noqa: F401
    from backoffice.models.product import Product  # noqa: F401
    from backoffice.models.section_product import SectionProduct  # noqa: F401
    from backoffice.models.section_service import SectionService  # noqa: F401
    from backoffice.models.service import Service  # noqa: F401

    SQLModel.metadata.create_all(engine)
