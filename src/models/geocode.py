from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class GeocodeResult(BaseModel):
    """Coordinates for one address, as returned to API callers."""

    model_config = ConfigDict(frozen=True)

    address: str
    latitude: float
    longitude: float
    source: Literal["cache", "upstream"]


# Subset of the Google Geocoding API response that we require
class UpstreamLocation(BaseModel):
    lat: float
    lng: float


class UpstreamGeometry(BaseModel):
    location: UpstreamLocation


class UpstreamResult(BaseModel):
    formatted_address: str = ""
    geometry: UpstreamGeometry


class UpstreamResponse(BaseModel):
    status: str
    error_message: Optional[str] = ""
    results: Optional[List[UpstreamResult]] = []

    @field_validator("error_message", mode="before")
    @classmethod
    def null_message_is_empty(cls, value):
        return "" if value is None else value

    @field_validator("results", mode="before")
    @classmethod
    def null_results_are_empty(cls, value):
        # null decodes the same as a missing list
        return [] if value is None else value
