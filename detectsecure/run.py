"""Programmatic uvicorn entry point for DetectSecure.

Loads the config once, builds the app from it and starts uvicorn on the
configured host and port (0.0.0.0:3000 by default; PORT overrides, as on most
PaaS hosts) with bounded concurrency and a short keep-alive.

Usage:
    python -m detectsecure.run
    detectsecure                # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from detectsecure.config import load_config
from detectsecure.main import create_app
from detectsecure.utils.logger import get_logger

logger = get_logger(__name__)

# Maximum concurrent connections; uvicorn answers 503 above this.
UVICORN_LIMIT_CONCURRENCY: int = 100

UVICORN_BACKLOG: int = 50

UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the DetectSecure API server.

    Raises:
        SystemExit: Propagated from load_config() on config parse errors.
    """
    config = load_config()
    logger.info("Starting DetectSecure", host=config.server.host, port=config.server.port)

    # One config load: the app reuses it for CORS and in its lifespan.
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
