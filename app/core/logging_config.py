import logging
import sys


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"


def setup_logging(level="INFO"):
    """Setup centralized logging configuration."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()

    # Clear existing handlers to prevent duplicate logs
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    # stderr keeps uvicorn's own output and ours interleaved correctly
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(console_handler)

    for logger_name in ["app", "uvicorn", "uvicorn.error", "uvicorn.access"]:
        named = logging.getLogger(logger_name)
        named.setLevel(level)
        named.handlers = []
        named.propagate = True

    root_logger.info(f"Logging initialized at level {logging.getLevelName(level)}")
