import logging

from src.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    """Configure root, application and uvicorn loggers once at startup."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(level)
    logging.getLogger("uvicorn.error").setLevel(level)

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)
    app_logger.propagate = True
