"""
Logging setup.
- INFO by default; LOG_LEVEL=DEBUG in development.
- Timestamped format with the logger name.
- Aligns the Uvicorn loggers so output is not duplicated.
"""
import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

def setup_logging(level: str | None = None) -> str:
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    for uv_logger in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(uv_logger).setLevel(resolved)
    return resolved
