"""
api/app.py — FastAPI application factory
==========================================
Creates and configures the FastAPI instance.  All configuration is
centralised here so that `main.py` stays minimal.

CORS
----
We allow all origins by default (suitable for local development and
demos).  In a production deployment restrict `allow_origins` to your
frontend domain.

Malformed request bodies are answered with HTTP 400 and an ``error`` field
(the same shape as the other client errors) rather than FastAPI's default
422 ``detail`` list.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router
from config import API_TITLE, API_VERSION
from utils.logger import get_logger

logger = get_logger("api.app")


async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected malformed request to %s: %d error(s)", request.url.path, len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid signal data. Expected array of numbers.",
            "details": "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            ),
        },
    )


def create_app() -> FastAPI:
    """
    Construct and return the configured FastAPI application.

    This is a *factory function* (rather than a module-level singleton)
    so that tests can create isolated app instances.
    """
    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        description=(
            "Remote photoplethysmography (rPPG) biomarker estimation API. "
            "⚠️ WELLNESS TOOL ONLY — not a medical device."
        ),
    )

    # ── CORS ────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],           # Restrict in production!
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, _invalid_request)

    # ── Mount routes ────────────────────────────────────────────────────
    app.include_router(router)

    return app
