# src/config/logging_config.py

"""Till session logging.

``setup_logging`` is called once at launch by ``main.py``. It hangs two
handlers off the ``pos_shop`` logger, so every ``pos_shop.<area>``
module logger (scanner, cart, checkout, catalog, payment, receipts)
inherits them:

* a session file ``logs/run_<YYYYmmdd_HHMMSS>.log`` at DEBUG, the
  record to read back when a sale went wrong;
* stderr at WARNING, kept quiet because the Textual screen and the
  CLI's JSON output share the terminal.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

LOGGER_NAME = "pos_shop"

_FILE_FORMAT = (
    "%(asctime)s %(levelname)-8s [%(name)s] "
    "%(funcName)s:%(lineno)d  %(message)s"
)
_STDERR_FORMAT = "%(levelname)s %(name)s: %(message)s"
_TIMESTAMP = "%Y-%m-%d %H:%M:%S"


def _session_log_path(logs_dir: Path) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"run_{stamp}.log"


def _file_handler(path: Path) -> logging.FileHandler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_TIMESTAMP))
    return handler


def _stderr_handler() -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter(_STDERR_FORMAT))
    return handler


def setup_logging() -> Path:
    """Attach the session handlers and return the session log path.

    Safe to call again: once the ``pos_shop`` logger has handlers no new
    ones are added and the path of the file already in use is returned.
    """
    session = logging.getLogger(LOGGER_NAME)
    session.setLevel(logging.DEBUG)

    for handler in session.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    if session.handlers:
        # Handlers installed by someone else; leave them alone.
        return _session_log_path(Settings.LOGS_DIR)

    Settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    log_path = _session_log_path(Settings.LOGS_DIR)
    session.addHandler(_file_handler(log_path))
    session.addHandler(_stderr_handler())

    session.info("Till session started, logging to %s", log_path)
    return log_path
