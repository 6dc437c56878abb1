"""Run the evaluation service with uvicorn for local development."""
from __future__ import annotations

import logging

import uvicorn

from web.config import get_settings

logger = logging.getLogger("evaluaciones.dev")


def main() -> None:
    settings = get_settings()
    logger.info(f"Serving on {settings.SERVER_HOST}:{settings.SERVER_PORT} (reload={settings.DEBUG})")
    uvicorn.run(
        "web.app:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
