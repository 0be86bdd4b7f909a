"""Logging and observability setup using Pydantic Logfire."""

import logging
import sys

from pr_reviewer.config.settings import Settings, settings

# Third-party loggers that log every HTTP exchange with the model provider
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "pydantic_ai")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for a review run.

    Args:
        level: Log level name; defaults to ``settings.log_level``
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_observability(app_settings: Settings = settings) -> bool:
    """Configure logging, then Logfire tracing of model requests when a token is set.

    Args:
        app_settings: Settings providing the log level and Logfire token

    Returns:
        True if Logfire instrumentation is active
    """
    setup_logging(app_settings.log_level)

    logger = logging.getLogger(__name__)

    if not app_settings.logfire_token:
        logger.debug("Logfire token not configured, skipping observability setup")
        return False

    try:
        import logfire
    except ImportError:
        logger.warning(
            "Logfire package not installed. Install with: pip install 'pr-reviewer[logfire]'"
        )
        return False

    logfire.configure(
        token=app_settings.logfire_token,
        service_name="pr-reviewer",
        environment=app_settings.environment,
    )
    logfire.instrument_pydantic_ai()

    logger.info(f"Logfire observability enabled for {app_settings.environment} environment")
    return True
