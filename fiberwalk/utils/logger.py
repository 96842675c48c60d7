"""
Logger - tagged log lines for Fiberwalk

Every record is one line, "[TAG] message - details". Tags in use:
SCENE, SCHED, DRIVER, FIELD, NOISE, SURFACE, CLI, APP.

Per-tick fiber chatter goes out at DEBUG, so it only shows with
--verbose or in a log file. INFO and up is also re-emitted as a Qt
signal, which FiberWindow shows in its status bar.
"""

import logging
import sys
from datetime import datetime
from enum import IntEnum
from typing import Optional
from PyQt5.QtCore import QObject, pyqtSignal


class LogLevel(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    ERROR = logging.ERROR


class LogSignalEmitter(QObject):
    log_message = pyqtSignal(str, int, str)  # message, level, HH:MM:SS


class QtSignalHandler(logging.Handler):
    """Forwards records to a LogSignalEmitter."""

    def __init__(self, emitter: LogSignalEmitter):
        super().__init__(level=logging.INFO)
        self.emitter = emitter

    def emit(self, record: logging.LogRecord):
        try:
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
            self.emitter.log_message.emit(self.format(record), record.levelno, timestamp)
        except Exception:
            self.handleError(record)


class FiberwalkLogger:
    """Console output, an optional log file and a Qt signal, behind one tagged API."""

    def __init__(self):
        self._logger = logging.getLogger("fiberwalk")
        self._logger.setLevel(logging.DEBUG)  # handlers filter
        self._logger.propagate = False

        self.signal_emitter = LogSignalEmitter()

        self._console_handler = logging.StreamHandler(sys.stdout)
        self._console_handler.setLevel(LogLevel.INFO)
        self._console_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"))
        self._logger.addHandler(self._console_handler)

        self._qt_handler = QtSignalHandler(self.signal_emitter)
        self._logger.addHandler(self._qt_handler)

        self._file_handler: Optional[logging.FileHandler] = None

    def configure(self, verbose: bool = False, log_file: Optional[str] = None):
        """Apply the CLI's logging flags. A new log_file replaces the old one."""
        self._console_handler.setLevel(LogLevel.DEBUG if verbose else LogLevel.INFO)
        if log_file:
            self.close_file()
            self._file_handler = logging.FileHandler(log_file, encoding="utf-8")
            self._file_handler.setLevel(LogLevel.DEBUG)
            self._file_handler.setFormatter(logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s"))
            self._logger.addHandler(self._file_handler)

    def close_file(self):
        if self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

    def _format_message(self, msg: str, component: Optional[str] = None,
                        details: Optional[str] = None) -> str:
        parts = [f"[{component}]"] if component else []
        parts.append(msg)
        if details:
            parts.append(f"- {details}")
        return " ".join(parts)

    def debug(self, msg: str, component: Optional[str] = None,
              details: Optional[str] = None):
        self._logger.debug(self._format_message(msg, component, details))

    def info(self, msg: str, component: Optional[str] = None,
             details: Optional[str] = None):
        self._logger.info(self._format_message(msg, component, details))

    def error(self, msg: str, component: Optional[str] = None,
              details: Optional[str] = None):
        self._logger.error(self._format_message(msg, component, details))

    def fiber(self, index: int, msg: str, details: Optional[str] = None):
        """DEBUG line for one fiber's driver."""
        self.debug(f"Fiber {index}: {msg}", component="DRIVER", details=details)


logger = FiberwalkLogger()
