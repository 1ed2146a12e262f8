"""
Server entry point — FastAPI app setup and route configuration.
Serves grouped capture profiles and clipboard-ready exports to the
viewer front end.
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import AsyncGenerator

import dotenv
import fastapi
import uvicorn
from fastapi.middleware import cors
from starlette import responses

from capture_viewer import config
from capture_viewer.models import records
from capture_viewer.records import aggregator, exporter
from capture_viewer.routes import view_models
from capture_viewer.services import collector
from capture_viewer.utils import errors, logger

dotenv.load_dotenv()

log = logger.create_logger("Server")

HOST = os.environ.get("UVICORN_HOST", "127.0.0.1")
PORT = int(os.environ.get("UVICORN_PORT", "3001"))
IS_PRODUCTION = os.environ.get("ENVIRONMENT", "development") == "production"

NO_DATA_MESSAGE = "No data available"


@contextlib.asynccontextmanager
async def lifespan(_app: fastapi.FastAPI) -> AsyncGenerator[None]:
    """Log server start and configuration problems on startup."""
    logger.start_log_file("capture-viewer")
    log.section("Capture Viewer Server Started")
    log.info("Environment", {"env": "production" if IS_PRODUCTION else "development"})
    problem = config.validate_collector_config()
    if problem:
        log.warn(problem)
    yield
    logger.end_log_file()


app = fastapi.FastAPI(title="Capture Viewer Server", lifespan=lifespan)

# ============================================================================
# Middleware
# ============================================================================

app.add_middleware(
    cors.CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

# ============================================================================
# Dependencies
# ============================================================================


def get_config() -> config.CollectorConfig:
    """Load collector settings from the environment."""
    return config.CollectorConfig()


async def load_profiles(
    request: fastapi.Request,
    cfg: config.CollectorConfig = fastapi.Depends(get_config),
) -> list[records.Profile]:
    """Fetch the record list and group it into profiles.

    The caller's access key header, when present, is passed
    through to the collector unchanged.
    """
    credential = request.headers.get(cfg.credential_header)
    try:
        raw_records = await collector.fetch_records(cfg, credential=credential)
    except errors.CollectorError as exc:
        log.error("Error fetching data", {"error": errors.get_error_message(exc)})
        raise fastapi.HTTPException(status_code=502, detail=NO_DATA_MESSAGE) from exc

    profiles = aggregator.group_by_profile(raw_records, default_profile=cfg.default_profile)
    expected = aggregator.count_records(raw_records)
    actual = aggregator.count_profile_records(profiles)
    if expected != actual:
        log.error("Record count changed during grouping", {"expected": expected, "actual": actual})
    return profiles


def _find_or_404(profiles: list[records.Profile], record_id: str) -> records.NormalizedRecord:
    record = view_models.find_record(profiles, record_id)
    if record is None:
        raise fastapi.HTTPException(status_code=404, detail=f"Record {record_id} not found")
    return record


# ============================================================================
# API Routes
# ============================================================================


@app.get("/api/health")
async def health_endpoint(
    cfg: config.CollectorConfig = fastapi.Depends(get_config),
) -> dict[str, object]:
    """Report liveness and whether the collector is configured."""
    return {"status": "ok", "configured": cfg.validate_config()}


@app.get("/api/profiles")
async def profiles_endpoint(
    profiles: list[records.Profile] = fastapi.Depends(load_profiles),
) -> list[dict[str, object]]:
    """Return captures grouped by profile, most recent first."""
    log.info("Serving profiles", {"profiles": len(profiles)})
    return view_models.serialize_profiles(profiles)


@app.get("/api/records/{record_id}/cookies")
async def export_cookies_endpoint(
    record_id: str,
    profiles: list[records.Profile] = fastapi.Depends(load_profiles),
) -> responses.PlainTextResponse:
    """Return a record's cookies as import-schema JSON text."""
    record = _find_or_404(profiles, record_id)
    text = exporter.to_clipboard_text(exporter.record_import_cookies(record))
    return responses.PlainTextResponse(text, media_type="application/json")


@app.get("/api/records/{record_id}/local-data")
async def export_local_data_endpoint(
    record_id: str,
    profiles: list[records.Profile] = fastapi.Depends(load_profiles),
) -> responses.PlainTextResponse:
    """Return a record's local-storage snapshot as JSON text."""
    record = _find_or_404(profiles, record_id)
    return responses.PlainTextResponse(exporter.to_clipboard_text(record.local_data), media_type="application/json")


# ============================================================================
# Start Server
# ============================================================================


def main() -> None:
    """Entry point for running the server."""
    log.success(f"Server listening on {HOST}:{PORT}")
    uvicorn.run(
        "capture_viewer.main:app",
        host=HOST,
        port=PORT,
        reload=not IS_PRODUCTION,
    )


if __name__ == "__main__":
    main()
