"""
Run the status API with uvicorn.

    python -m lifecycle_orchestrator
"""

import uvicorn

from lifecycle_orchestrator.api.main import create_app
from lifecycle_orchestrator.core.config import get_settings
from lifecycle_orchestrator.core.logging import setup_logging, get_logger


def main() -> None:
    settings = get_settings()
    setup_logging(settings)
    logger = get_logger("main")

    logger.info(
        "starting_server",
        host=settings.API_HOST,
        port=settings.API_PORT
    )

    uvicorn.run(
        create_app(settings=settings),
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
