"""Main entry point - runs the API server."""

import logging

import uvicorn

from griffin.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reduce noise from HTTP client libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def main() -> None:
    """Start the Griffin orchestrator API."""
    settings = get_settings()
    configure_logging("DEBUG" if settings.debug else settings.log_level)

    logger.info("Starting Griffin orchestrator...")
    logger.info(f"Environment: {settings.environment}")
    if settings.dry_run:
        logger.warning("DRY_RUN enabled - quotes and execution are simulated")

    uvicorn.run(
        "griffin.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
