import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from backoffice.database import create_db_engine, init_db
from backoffice.routes import catalog_publishing, catalog_sections, products, services
from backoffice.utils.http import register_error_handlers

APP_NAME = "Catalog Back-Office API"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Root logging setup from LOG_LEVEL (default INFO)"""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _cors_origins():
    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]
    extra = os.getenv("CORS_ORIGINS", "")
    if extra:
        origins.extend(o.strip() for o in extra.split(",") if o.strip())
    return origins


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    """
    Composition root.

    The engine is created here (or injected by tests), stored on app.state
    for the get_session dependency, and disposed when the app shuts down.
    """
    engine = engine or create_db_engine()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(app.state.engine)
        logger.info("%s started (database: %s)", APP_NAME, app.state.engine.url.render_as_string(hide_password=True))
        yield
        app.state.engine.dispose()
        logger.info("%s stopped", APP_NAME)

    app = FastAPI(title=APP_NAME, lifespan=lifespan)
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(catalog_sections.router, prefix="/api/admin", tags=["catalog-sections"])
    app.include_router(catalog_publishing.router, prefix="/api/admin", tags=["catalog-publishing"])
    app.include_router(products.router, prefix="/api/admin", tags=["products"])
    app.include_router(services.router, prefix="/api/admin", tags=["services"])

    @app.get("/api/health")
    def health_check():
        """Diagnostic endpoint"""
        return {"app_name": APP_NAME, "status": "healthy"}

    return app


def main() -> None:
    """Run the API with uvicorn (HOST/PORT from the environment)"""
    import uvicorn

    configure_logging()
    uvicorn.run(create_app(), host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
