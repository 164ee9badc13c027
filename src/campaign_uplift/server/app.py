"""
FastAPI application for campaign-uplift.

Exposes the authenticated recompute trigger and read-only views of the
persisted uplift table.  Settings are loaded per request when not given
explicitly, so a recompute always runs with the current configuration.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from loguru import logger

from campaign_uplift import __version__
from campaign_uplift.config import UpliftSettings, load_settings
from campaign_uplift.persistence.store import UpliftStore
from campaign_uplift.pipeline.recompute import recompute_attribution
from campaign_uplift.server.auth import BearerAuthMiddleware


def create_app(
    settings: UpliftSettings | None = None,
    config_path: str | Path | None = None,
    auth_token: str | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:    Fixed settings; if None they are loaded on each request.
        config_path: YAML file used when loading settings.
        auth_token:  Bearer token; defaults to ``API_AUTH_TOKEN``.
    """

    def current_settings() -> UpliftSettings:
        return settings if settings is not None else load_settings(config_path)

    application = FastAPI(
        title="campaign-uplift API",
        description="Recompute and read per-activity campaign uplift.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    application.add_middleware(BearerAuthMiddleware, token=auth_token)

    @application.get("/health")
    def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
        }

    @application.post("/api/recompute")
    def recompute():
        try:
            current = current_settings()
            store = UpliftStore(current.storage.database_path)
            store.ensure_schema()
            result = recompute_attribution(store, current.attribution)
        except Exception as exc:
            logger.exception("Attribution recompute failed")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": str(exc),
                    "code": getattr(exc, "code", "INTERNAL_ERROR"),
                },
            )
        return {"success": True, **result.to_dict()}

    @application.get("/api/v1/uplifts")
    def list_uplifts():
        store = UpliftStore(current_settings().storage.database_path)
        store.ensure_schema()
        df = store.load_uplifts()
        records = df.astype(object).where(df.notna(), None).to_dict(orient="records")
        return {"data": records, "n_rows": len(records)}

    @application.get("/api/v1/config")
    def show_config():
        return current_settings().attribution.model_dump(mode="json")

    return application


# Default instance for ``uvicorn campaign_uplift.server.app:app``
app = create_app()


def run_server(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Start the API server."""
    import uvicorn

    logger.info(f"Starting campaign-uplift API on {host}:{port}")
    uvicorn.run("campaign_uplift.server.app:app", host=host, port=port, reload=reload)
