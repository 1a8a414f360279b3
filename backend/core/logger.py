"""
Logging setup for the server and the in-process client.

Levels, handlers and formats are declared in etc/logging.conf; the only
thing filled in here is the rotating file's path (``%(log_file)s`` in the
config).  The config is read from the source checkout, so the project must
be run from it or installed with ``pip install -e .``.

    from core.logger import logger

Client modules log under the ``inventory.client`` child logger.
"""

import configparser
import logging
import logging.config
from pathlib import Path

LOGGER_NAME = "inventory"

# backend/core/logger.py → project root
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"
LOG_FILE = _PROJECT_ROOT / "log" / "app.log"


def configure_logging(conf_path: Path = LOGGING_CONF, log_file: Path = LOG_FILE) -> logging.Logger:
    """Apply *conf_path* with its file handler writing to *log_file*."""
    if not conf_path.is_file():
        raise FileNotFoundError(
            f"Logging config not found at {conf_path}; "
            "run from a source checkout or an editable install"
        )
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # as_posix: handler args are evaluated as Python, so backslashes would escape
    text = conf_path.read_text(encoding="utf-8").replace("%(log_file)s", log_file.as_posix())

    # Raw parser: the format strings' %(asctime)s must reach logging untouched
    parser = configparser.RawConfigParser()
    parser.read_string(text)
    logging.config.fileConfig(parser, disable_existing_loggers=False)
    return logging.getLogger(LOGGER_NAME)


logger = configure_logging()
