from __future__ import annotations

import logging
import pathlib
import sys
import time
from dataclasses import dataclass

import orjson

from ..config import CONFIG_PATH, db_path, ensure_config, load_config
from ..db.store import SqliteStatsStore
from ..logging_setup import get_log_path, setup_logging

CENTRAL_LOG_PATH = get_log_path()


@dataclass
class InitResult:
    config_created: bool
    db_created: bool


def ensure_database(path: str) -> bool:
    created = not pathlib.Path(path).exists()
    store = SqliteStatsStore(path)
    store.close()
    return created


def install_and_init() -> InitResult:
    cfg_new = ensure_config()
    db_new = ensure_database(db_path(load_config()))
    if cfg_new or db_new:
        logging.getLogger(__name__).info("Initialised configuration and database")
    return InitResult(cfg_new, db_new)


def log_event(module: str, event: str, **kwargs) -> None:
    """Structured event logging through the central logger.

    Emits a single JSON line via the Python logging system so it reaches the
    central log file configured by logging_setup.setup_logging().
    """
    payload = {"ts": time.time(), "module": module, "event": event}
    payload.update(kwargs)
    try:
        line = orjson.dumps(payload).decode("utf-8")
        logging.getLogger(f"event.{module}").info(line)
    except TypeError:
        logging.getLogger("event").exception("failed to log event: %s", {"module": module, "event": event})


def main() -> None:
    import argparse
    import zipfile
    import datetime as dt

    parser = argparse.ArgumentParser(prog="blackjack-diag")
    parser.add_argument("--bundle", required=True)
    args = parser.parse_args()

    setup_logging(overwrite=False)
    install_and_init()
    path = pathlib.Path(db_path(load_config()))

    bundle_path = pathlib.Path(args.bundle)
    with zipfile.ZipFile(bundle_path, "w", compression=zipfile.ZIP_DEFLATED) as z:
        z.writestr("config.toml", CONFIG_PATH.read_text(encoding="utf-8"))
        if path.exists():
            z.write(path, arcname="coach.sqlite")
        if CENTRAL_LOG_PATH.exists():
            z.write(CENTRAL_LOG_PATH, arcname=CENTRAL_LOG_PATH.name)
        z.writestr("env.txt", f"python={sys.version}\nplatform={sys.platform}\n")
        z.writestr("timestamp.txt", dt.datetime.now(dt.timezone.utc).isoformat())
    logging.getLogger(__name__).info("Diagnostics bundle written to %s", bundle_path)
