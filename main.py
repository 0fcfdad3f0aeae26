"""
Main entrypoint for the address geocoding API.

Usage:
    Put GOOGLE_MAPS_API_KEY (and optionally PORT) in the environment or in a local .env file,
    then run `python main.py`. The API listens on http://0.0.0.0:<PORT>/geocode?address=...
"""
import logging

import uvicorn

from src.api.app import app, init_service
from src.config import ConfigurationError, load_settings

logger = logging.getLogger(__name__)


def main():
    """
    Load configuration, build the geocoding service and serve the API.
    """
    try:
        settings = load_settings(".env")
    except ConfigurationError as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    init_service(settings)

    logger.info(f"Starting server on port {settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=int(settings.port),
        timeout_keep_alive=60,
    )
    return 0


if __name__ == "__main__":
    exit_code = main()
    print(f"Exiting with code {exit_code}")
    raise SystemExit(exit_code)
