import logging
import os
from typing import Optional

from rich.logging import RichHandler


def setup_logging(level: Optional[str] = None):
    """
    Configure logging for the API server and the terminal storefront.
    Reads LOG_LEVEL from the environment when no level is given (default INFO).
    All records go through a single rich console handler.
    """
    level_str = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_str, logging.INFO)

    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    # uvicorn installs its own handlers; route them through ours instead
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = True

    logging.getLogger(__name__).debug("Log level set to %s", level_str)
