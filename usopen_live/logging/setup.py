import sys
import logging
from typing import Optional

from loguru import logger

from usopen_live.config.settings import AppSettings, settings as default_settings


class InterceptHandler(logging.Handler):
    """Routes standard logging records (uvicorn, httpx) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(app_settings: Optional[AppSettings] = None) -> None:
    """Configures Loguru logger based on application settings."""
    app_settings = app_settings or default_settings
    logger.remove()  # Remove default handler

    if app_settings.log_json:
        logger.add(
            sys.stderr,
            level=app_settings.log_level.upper(),
            serialize=True,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=app_settings.log_level.upper(),
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                "<level>{message}</level>"
            ),
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

    logger.info(f"Logging initialized with level: {app_settings.log_level}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # uvicorn installs its own handlers; send them through loguru as well
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
    logger.debug("Standard logging intercepted.")
