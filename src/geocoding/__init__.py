"""
Geocoding Module
--------------
Handles forward geocoding of free-text addresses to geographic coordinates.
Delegates to the Google Maps Geocoding API, with a thread-safe TTL cache in front of it.
"""
