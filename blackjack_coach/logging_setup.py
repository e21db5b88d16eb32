from __future__ import annotations

import logging
import pathlib
import sys
import threading
import traceback


LOG_FILE_NAME = "blackjack-coach.log"


def get_log_path() -> pathlib.Path:
    return pathlib.Path.cwd() / LOG_FILE_NAME


def setup_logging(overwrite: bool = True, level: int = logging.INFO, capture_stdio: bool = False) -> None:
    """Configure root logging to a single file in the current working directory.

    - Overwrites the log file on first setup (per process) if overwrite is True
    - Adds a STDERR handler for immediate visibility
    - Installs sys.excepthook and threading excepthook
    - Optionally redirects stdout/stderr into logging (not for interactive drills)
    - Captures warnings via logging
    """
    log_path = get_log_path()

    # Prevent duplicate handlers on re-entry
    root_logger = logging.getLogger()
    if getattr(root_logger, "_bc_logging_configured", False):
        return

    fmt = "%(asctime)s.%(msecs)03d %(levelname)s [%(process)d:%(threadName)s] %(name)s - %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    handlers: list[logging.Handler] = []
    file_mode = "w" if overwrite else "a"
    file_handler = logging.FileHandler(log_path, mode=file_mode, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    handlers.append(file_handler)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    # The terminal only sees problems; the file gets everything
    stderr_handler.setLevel(logging.WARNING)
    handlers.append(stderr_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    root_logger._bc_logging_configured = True  # type: ignore[attr-defined]

    logging.captureWarnings(True)

    sys.excepthook = _log_unhandled_exception  # type: ignore[assignment]
    threading.excepthook = _log_thread_exception  # type: ignore[attr-defined]

    if capture_stdio:
        sys.stdout = _StreamToLogger(logging.getLogger("stdout"), logging.INFO)  # type: ignore[assignment]
        sys.stderr = _StreamToLogger(logging.getLogger("stderr"), logging.ERROR)  # type: ignore[assignment]


def _log_unhandled_exception(exc_type, exc_value, exc_tb) -> None:  # type: ignore[no-untyped-def]
    logger = logging.getLogger("unhandled")
    tb_str = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    logger.critical("Unhandled exception:\n%s", tb_str)


def _log_thread_exception(args) -> None:  # type: ignore[no-untyped-def]
    logger = logging.getLogger("thread")
    tb_str = "".join(traceback.format_exception(args.exc_type, args.exc_value, args.exc_traceback))
    logger.critical("Unhandled thread exception in %s:\n%s", getattr(args, "thread", None), tb_str)


class _StreamToLogger:
    def __init__(self, logger: logging.Logger, level: int) -> None:
        self.logger = logger
        self.level = level
        self._buffer = ""

    def write(self, message: str) -> None:
        self._buffer += message
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            if line:
                self.logger.log(self.level, line)

    def flush(self) -> None:
        if self._buffer:
            self.logger.log(self.level, self._buffer)
            self._buffer = ""
