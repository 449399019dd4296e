import json
import logging
from typing import Any

logger = logging.getLogger("app")


def configure_logging(level: str) -> None:
    # Una línea JSON por evento; el formato lo pone log_event
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level, logging.INFO))


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger.log(level, json.dumps({"event": event, **fields}, default=str))
