"""
Geocoding Service
--------------
Resolves free-text addresses to coordinates. Lookups go through an in-memory
TTL cache first; on a miss a single upstream request is raced against the
caller's RequestContext and successful answers are cached.
"""
import logging
import concurrent.futures
from threading import Event
from typing import Any, Dict, Optional

from pydantic import ValidationError

from src.config import Settings
from src.geocoding.cache import GeocodeCache
from src.geocoding.client import GeocodingProvider, GoogleGeocodingClient
from src.geocoding.context import RequestContext
from src.geocoding.errors import AddressRequiredError, GeocodingError, NoResultsError, UpstreamError
from src.models.geocode import GeocodeResult, UpstreamResponse

# Get logger
logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """Cache key and upstream query for an address: trimmed and lower-cased."""
    return address.strip().lower()


class GeocodingService:
    """
    Cache-backed lookup orchestrator.

    Each call to geocode() makes at most one upstream request and never
    retries. Concurrent misses for the same address are not de-duplicated;
    both requests go upstream and the last one to finish wins the cache slot.
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[GeocodingProvider] = None,
        cache: Optional[GeocodeCache] = None,
    ):
        self.settings = settings
        self.provider = provider or GoogleGeocodingClient(
            api_key=settings.api_key.get_secret_value(),
            base_url=settings.upstream_url,
        )
        self.cache = cache or GeocodeCache(ttl=settings.cache_ttl)
        # Runs the blocking upstream call so it can be raced against the context
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=settings.upstream_workers,
            thread_name_prefix="geocode-upstream",
        )

    def geocode(self, ctx: RequestContext, raw_address: str) -> GeocodeResult:
        address = normalize_address(raw_address)
        if not address:
            raise AddressRequiredError()

        cached, found = self.cache.get(address)
        if found:
            logger.debug(f"Cache hit for '{address}'")
            return cached.model_copy(update={"source": "cache"})

        logger.info(f"Cache miss for '{address}', querying upstream")
        payload = self._fetch(ctx, address)
        result = self._interpret(address, payload)

        self.cache.set(address, result)
        logger.info(f"Successfully geocoded '{address}' ({result.latitude}, {result.longitude})")
        return result

    def _fetch(self, ctx: RequestContext, address: str) -> Dict[str, Any]:
        remaining = ctx.remaining()
        ctx.check()

        timeout = self.settings.upstream_timeout
        if remaining is not None:
            timeout = min(timeout, remaining)

        finished = Event()
        try:
            future = self._executor.submit(self.provider.fetch, address, timeout)
        except RuntimeError as e:
            # Raised once close() has shut the pool down
            logger.error(f"Cannot query upstream for '{address}': {e}")
            raise UpstreamError("geocoding service is shut down") from e
        future.add_done_callback(lambda _: finished.set())
        ctx.add_done_callback(finished.set)
        try:
            while not finished.wait(ctx.remaining()):
                if ctx.error() is not None:
                    break
        finally:
            ctx.remove_done_callback(finished.set)

        if not future.done():
            # The context fired first; the worker is left to hit its own socket timeout
            future.cancel()
            err = ctx.error()
            logger.warning(f"Upstream request for '{address}' abandoned: {err}")
            raise err

        try:
            return future.result()
        except GeocodingError:
            # A failure caused by the deadline firing is reported as such
            ctx.check()
            raise
        except Exception as e:
            ctx.check()
            logger.error(f"Unexpected error from upstream provider for '{address}': {e}")
            raise UpstreamError(f"upstream request failed: {e}") from e

    def _interpret(self, address: str, payload: Any) -> GeocodeResult:
        try:
            response = UpstreamResponse.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Malformed upstream payload for '{address}': {e.error_count()} validation error(s)")
            raise UpstreamError("google maps api returned a malformed payload") from e

        if response.status != "OK":
            logger.warning(f"Upstream status {response.status} for '{address}'")
            if response.error_message:
                raise UpstreamError(f"google maps api error: {response.error_message}")
            raise UpstreamError(f"google maps api status: {response.status}")

        if not response.results:
            logger.info(f"No results found for '{address}'")
            raise NoResultsError()

        # Upstream orders results by relevance; only the first is used
        top = response.results[0]
        return GeocodeResult(
            address=top.formatted_address,
            latitude=top.geometry.location.lat,
            longitude=top.geometry.location.lng,
            source="upstream",
        )

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.provider.close()
