"""
Data Models Module
----------------
Contains Pydantic models for data validation and serialization.
Defines the geocoding result returned to callers and the shape of the upstream provider payload.
"""
