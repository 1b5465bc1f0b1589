from __future__ import annotations

# Standard library
import logging as _logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Final

# Third-party
import structlog
from dotenv import load_dotenv
from fastapi import FastAPI

# Local application imports
from . import __version__
from .api.evaluations import router as evaluations_router
from .domain.evaluation.phrase_catalog import get_catalog
from .infrastructure.config import get_feedback_locale
from .infrastructure.persistence.factory import get_history_repository

load_dotenv()

# --- Basic logging configuration (minimal) ---
_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_logging.basicConfig(
    level=getattr(_logging, _LOG_LEVEL, _logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

# structlog routed through stdlib logging so LOG_LEVEL applies to both
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.KeyValueRenderer(key_order=["event"]),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

APP_VERSION: Final[str] = os.getenv("APP_VERSION", __version__)

logger = _logging.getLogger(__name__)


def check_settings() -> None:
    """Fail at startup on settings every request depends on.

    Raises:
        UnknownLocaleError: FEEDBACK_LOCALE has no phrase catalog
        ValueError: HISTORY_BACKEND unknown or missing MONGODB_URI
    """
    catalog = get_catalog(get_feedback_locale())
    repository = get_history_repository()
    logger.info(
        "settings.checked",
        extra={"locale": catalog.locale, "history": type(repository).__name__},
    )


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    check_settings()
    logger.info("lifespan.ready", extra={"version": APP_VERSION})
    yield
    logger.info("lifespan.shutdown")


app = FastAPI(title="cookscore", version=APP_VERSION, lifespan=lifespan)
app.include_router(evaluations_router)


@app.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok", "version": APP_VERSION}
