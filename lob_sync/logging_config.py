import logging
import sys
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
LOG_TZ = ZoneInfo("Europe/Berlin")

# requests' connection pool logs every snapshot fetch at DEBUG
QUIET_LOGGERS = ("urllib3",)


def daily_log_path(base_dir: str | Path, component: str, subdir: str) -> Path:
    """logs/<component>/<subdir>/YYYY-MM-DD.log, dated in Berlin time. Creates the directory."""
    log_dir = Path(base_dir) / component / subdir
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"{datetime.now(LOG_TZ):%Y-%m-%d}.log"


def setup_logging(
    level: str = "INFO",
    component: str = "sync",
    subdir: str = "default",
    base_dir: str | Path = "logs",
    console_to_stderr: bool = False,
) -> Path:
    """
    Route the root logger to the daily file for one synchronizer run.

    ``subdir`` is normally the instrument symbol, so each pair gets its own
    directory. The console handler writes to stdout unless the top-of-book
    redraw owns stdout, in which case it moves to stderr.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_path = daily_log_path(base_dir, component, subdir)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(LOG_FORMAT)
    handlers = [
        logging.FileHandler(log_path, encoding="utf-8"),
        logging.StreamHandler(sys.stderr if console_to_stderr else sys.stdout),
    ]
    for h in handlers:
        h.setFormatter(fmt)
        root.addHandler(h)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_path
