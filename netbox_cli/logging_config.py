import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

CONSOLE_HANDLER = "netbox-cli-console"
FILE_HANDLER = "netbox-cli-file"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _find_handler(root: logging.Logger, name: str) -> Optional[logging.Handler]:
    return next((h for h in root.handlers if h.get_name() == name), None)


def _formatter() -> logging.Formatter:
    return logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)


def _attach_log_file(root: logging.Logger, log_dir: Path) -> None:
    current = _find_handler(root, FILE_HANDLER)
    if current is not None:
        if os.path.dirname(current.baseFilename) == os.path.abspath(log_dir):
            return
        root.removeHandler(current)
        current.close()

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d__%H_%M_%S")
        log_file = log_dir / f"netbox-cli-log_{timestamp}.log"
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    except PermissionError as exc:
        root.error(
            "File logging disabled (permission error writing to %s, uid=%s). Error: %s",
            str(log_dir),
            os.getuid() if hasattr(os, "getuid") else "n/a",
            exc,
        )
        return
    except OSError as exc:
        root.error("File logging disabled (OS error creating log file under %s): %s", str(log_dir), exc)
        return

    file_handler.set_name(FILE_HANDLER)
    file_handler.setFormatter(_formatter())
    root.addHandler(file_handler)
    root.info("Logging to file: %s", log_file)


def configure_logging(level: str = "WARNING", log_dir: Optional[Path] = None) -> None:
    """Configure the root logger; safe to call again once settings are loaded.

    The first call replaces any existing root handlers with a stderr console
    handler (stdout is reserved for rendered Netbox objects). Later calls only
    adjust the level, and open a new log file when log_dir changes.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        log_dir: If provided, log to a timestamped file in this directory.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if _find_handler(root, CONSOLE_HANDLER) is None:
        root.handlers.clear()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.set_name(CONSOLE_HANDLER)
        console_handler.setFormatter(_formatter())
        root.addHandler(console_handler)

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(root.level, logging.INFO))

    if log_dir:
        _attach_log_file(root, Path(log_dir))
