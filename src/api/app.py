"""
API Module
---------
Exposes the geocoding service over HTTP using FastAPI.
Features include:
- Resolving a free-text address to coordinates
- Health checking
"""
from contextlib import asynccontextmanager
from threading import Lock
from typing import Optional

from fastapi import FastAPI, Depends, Query, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from src.config import Settings, load_settings
from src.geocoding.context import RequestContext
from src.geocoding.errors import (
    AddressRequiredError, DeadlineError, GeocodingError, NoResultsError, UpstreamError
)
from src.geocoding.service import GeocodingService
from src.models.geocode import GeocodeResult

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

# Process-wide service, built once from settings
_service: Optional[GeocodingService] = None
_service_lock = Lock()


def init_service(settings: Settings) -> GeocodingService:
    global _service
    with _service_lock:
        if _service is None:
            _service = GeocodingService(settings)
            logger.info(f"Geocoding service ready (cache TTL {settings.cache_ttl:.0f}s)")
        return _service


def get_geocoding_service() -> GeocodingService:
    if _service is None:
        raise RuntimeError("geocoding service is not initialized")
    return _service


def close_service() -> None:
    global _service
    with _service_lock:
        if _service is not None:
            _service.close()
            _service = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A missing API key stops the server here rather than failing requests later
    if _service is None:
        init_service(load_settings())
    yield
    close_service()


app = FastAPI(
    title="Address Geocoder API",
    description="Resolves free-text addresses to coordinates with an in-memory cache in front of Google Maps",
    version="1.0.0",
    lifespan=lifespan,
)

# Status codes for each failure kind
ERROR_STATUS = (
    (AddressRequiredError, 400),
    (NoResultsError, 404),
    (DeadlineError, 504),
    (UpstreamError, 502),
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Framework errors (unknown route, wrong method) use the same body shape as geocoding errors
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail).lower()},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(GeocodingError)
async def geocoding_error_handler(request: Request, exc: GeocodingError):
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        status_code = 502

    if isinstance(exc, DeadlineError):
        return error_response(status_code, "geocoding request timed out")
    return error_response(status_code, str(exc))


@app.api_route("/healthz", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
def healthz():
    return {"status": "ok"}


@app.get("/geocode", response_model=GeocodeResult)
def geocode(
    address: str = Query("", description="Free-text address to resolve"),
    service: GeocodingService = Depends(get_geocoding_service),
):
    """
    Resolve an address to coordinates.
    Repeated lookups of the same address (ignoring case and surrounding whitespace)
    are answered from the cache until the entry expires.
    """
    address = address.strip()
    if not address:
        return error_response(400, "address query parameter is required")

    ctx = RequestContext(timeout=service.settings.request_timeout)
    try:
        return service.geocode(ctx, address)
    except GeocodingError:
        raise
    except Exception as e:
        logger.error(f"Error geocoding '{address}': {str(e)}")
        return error_response(502, str(e))
