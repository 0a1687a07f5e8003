import os
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from zulu_assistant import __version__
from zulu_assistant.config import settings
from zulu_assistant.database import init_db
from zulu_assistant.logging_config import get_logger, setup_logging
from zulu_assistant.routers import admin, webhook
from zulu_assistant.services.catalog_service import get_catalog, refresh_catalog

setup_logging()

logger = get_logger("main")

app = FastAPI(
    title="Zulu Club Assistant",
    description="WhatsApp shopping assistant for Zulu Club",
    version=__version__,
)

cors_env = os.environ.get("CORS_ALLOW_ORIGINS", "*")
cors_origins = [origin.strip() for origin in cors_env.split(",") if origin.strip()]
if not cors_origins:
    cors_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhook.router)
app.include_router(admin.router)


@app.on_event("startup")
def load_reference_data() -> None:
    if settings.store_backend == "sql" or settings.session_backend == "sql":
        try:
            init_db()
        except SQLAlchemyError as e:
            logger.error(f"Database init failed: {e}")

    result = refresh_catalog()
    if not result.ok:
        logger.error(
            "Starting with an empty catalog",
            extra={"context": {"error": result.error}},
        )


@app.get("/")
def status():
    catalog = get_catalog()
    return {
        "status": "Zulu Club AI Assistant running",
        "version": __version__,
        "categoriesLoaded": len(catalog.categories),
        "galleriesLoaded": len(catalog.galleries),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
def health():
    return {"status": "ok"}
