import logging

from config.settings import log_level

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: int | None = None) -> logging.Logger:
    """Setup basic logging configuration"""
    logging.basicConfig(
        level=level if level is not None else log_level(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
    return logging.getLogger("complex_mapping")
