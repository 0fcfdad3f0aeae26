"""
Geocoding Errors
--------------
Error taxonomy raised by the lookup service. The API layer is the only place
these are turned into HTTP status codes.
"""


class GeocodingError(Exception):
    """Base class for every per-request geocoding failure."""


class AddressRequiredError(GeocodingError):
    def __init__(self, message="address is required"):
        super().__init__(message)


class NoResultsError(GeocodingError):
    def __init__(self, message="no results found"):
        super().__init__(message)


class UpstreamError(GeocodingError):
    """The provider could not be reached or answered with something unusable."""


class DeadlineError(GeocodingError):
    """The request context fired before the upstream call completed."""


class RequestTimeoutError(DeadlineError):
    def __init__(self, message="geocoding request deadline exceeded"):
        super().__init__(message)


class RequestCanceledError(DeadlineError):
    def __init__(self, message="geocoding request canceled"):
        super().__init__(message)
