"""
Main entrypoint: ChainRisk FastAPI server under uvicorn.

Env: API_HOST, API_PORT, LOG_LEVEL, plus chain endpoint/API key vars (see
backend_chainrisk/config/env.py).

Equivalent: uvicorn backend_chainrisk.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_chainrisk.chainrisk_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Resolve settings and run the API server in the main thread."""
    from backend_chainrisk.config.settings import get_settings

    settings = get_settings()

    from backend_chainrisk.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
