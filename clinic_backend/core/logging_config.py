import logging

from clinic_backend.core import config

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def configure_logging(log_level: str | None = None) -> None:
    level_name = (log_level or config.LOG_LEVEL).upper()
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, level_name, logging.INFO),
    )
