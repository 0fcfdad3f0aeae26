"""
Geocode Cache
--------------
In-memory TTL cache for successful lookups, keyed by normalized address.
"""
import time
import logging
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from src.models.geocode import GeocodeResult

# Get logger
logger = logging.getLogger(__name__)


class GeocodeCache:
    """
    Thread-safe mapping of normalized address -> GeocodeResult with a fixed TTL.

    Expired entries are removed by the first get() that sees them; there is no
    background sweeper.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        # Format: {normalized_address: (result, expires_at)}
        self._items: Dict[str, Tuple[GeocodeResult, float]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Tuple[Optional[GeocodeResult], bool]:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None, False

            value, expires_at = item
            if self._clock() >= expires_at:
                del self._items[key]
                logger.debug(f"Cache entry expired for '{key}'")
                return None, False

        return value, True

    def set(self, key: str, value: GeocodeResult) -> None:
        expires_at = self._clock() + self.ttl
        with self._lock:
            self._items[key] = (value, expires_at)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
