import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError

from mtx_gateway.config import get_settings
from mtx_gateway.main import create_app
from mtx_gateway.utils.logging import setup_logging

logger = logging.getLogger("mtx_gateway")


def main():
    parser = argparse.ArgumentParser(
        prog="mtx-gateway",
        description="Serve a paginated JSON view of upstream RTSP connections.",
    )
    parser.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Listen port (default: PORT or 8080)")
    args = parser.parse_args()

    setup_logging()
    try:
        settings = get_settings()
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]) for err in e.errors())
        logger.critical("Missing or invalid configuration: %s", missing)
        logger.critical("BASE_URL, AUTH_USER and AUTH_PASS must be set in the environment or .env")
        sys.exit(1)

    updates = {}
    if args.host:
        updates["HOST"] = args.host
    if args.port:
        updates["PORT"] = args.port
    if updates:
        settings = settings.model_copy(update=updates)

    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
