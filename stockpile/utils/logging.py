import logging

from ..config import settings

logger = logging.getLogger("stockpile")

if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )
    logger.addHandler(_handler)

logger.setLevel(settings.LOG_LEVEL.upper())
