"""
API Module
---------
Provides the RESTful geocoding endpoint using FastAPI.
Features include:
- Resolving addresses to coordinates through the cached geocoding service
- Mapping geocoding failures to HTTP status codes
"""
