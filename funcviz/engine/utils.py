import logging
import math
from typing import Any, Optional

from funcviz.config import settings


# -------- logging setup --------

def setup_logger(name, level_str=settings.LOG_LEVEL):
    """
    Sets up a module logger with a console stream handler.
    Propagation stays ON so an application-level handler on the root still sees everything.
    """
    log_level = getattr(logging, level_str.upper(), logging.INFO)
    formatter = logging.Formatter('%(asctime)s - %(levelname)5s | %(name)s | %(message)s')

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Avoid duplicate console handlers on repeated imports
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

    logger.propagate = True
    return logger


# -------- small text helpers --------

def truncate(text: str, limit: int = 120, ellipsis: str = "…") -> str:
    """Shorten text to 'limit' characters with a tidy word boundary if possible."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0]
    return (cut if cut else text[:limit]) + ellipsis


# -------- numeric helpers --------

def finite_or_none(value: Any) -> Optional[float]:
    """
    JSON has no NaN/Infinity. Map anything non-finite (or non-numeric) to None.
    """
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None
