"""Shared pytest fixtures and stubs for all tests."""

import threading

import pytest

from src.config import Settings
from src.geocoding.client import GeocodingProvider
from src.geocoding.service import GeocodingService


def ok_payload(formatted_address, lat, lng):
    """Build a minimal successful provider payload with a single result."""
    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": formatted_address,
                "geometry": {"location": {"lat": lat, "lng": lng}},
            }
        ],
    }


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class StubProvider(GeocodingProvider):
    """Provider returning canned payloads and counting calls per address."""

    def __init__(self, payloads=None, error=None, delay=None):
        self.payloads = payloads or {}
        self.error = error
        self.delay = delay
        self.calls = []
        self.timeouts = []
        self.closed = False
        self.release = threading.Event()

    def fetch(self, address, timeout=None):
        self.calls.append(address)
        self.timeouts.append(timeout)
        if self.delay is not None:
            self.release.wait(self.delay)
        if self.error is not None:
            raise self.error
        return self.payloads.get(address, {"status": "ZERO_RESULTS", "results": []})

    def close(self):
        self.closed = True
        self.release.set()


@pytest.fixture
def settings():
    return Settings(api_key="test-key", cache_ttl=60, request_timeout=3.0, upstream_workers=2)


@pytest.fixture
def provider():
    return StubProvider()


@pytest.fixture
def service(settings, provider):
    svc = GeocodingService(settings, provider=provider)
    yield svc
    svc.close()
