"""
Process entry point - Runs the API under uvicorn.

uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown, which
closes the database connection. The exit status is 1 if that close
failed, 0 otherwise.
"""

import logging
import sys

import uvicorn

from src.api.main import create_app
from src.config.settings import get_settings


def main() -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings)
    server = uvicorn.Server(uvicorn.Config(app, host=settings.host, port=settings.port))
    server.run()

    return 1 if app.state.shutdown_failed else 0


if __name__ == "__main__":
    sys.exit(main())
