"""
Scan Notifiers
Observers the scanners report to: a notifier is any callable taking
(log_type, message). Scanners never depend on what a notifier does.
"""

import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from porthunt.models.scan_result import TCPPortScanResult


class LogType(Enum):
    """Notification priority"""
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    WARNING = "WARNING"
    DEBUG = "DEBUG"


ALL_LOG_TYPES = tuple(LogType)

Notifier = Callable[[LogType, str], None]

_LOG_LEVELS = {
    LogType.SUCCESS: logging.INFO,
    LogType.ERROR: logging.ERROR,
    LogType.WARNING: logging.WARNING,
    LogType.DEBUG: logging.DEBUG,
}


def no_log() -> Notifier:
    """Notifier that drops everything"""
    def notify(log_type: LogType, message: str) -> None:
        pass
    return notify


def log_to_logger(
    logger: Optional[logging.Logger] = None,
    types: Iterable[LogType] = ALL_LOG_TYPES
) -> Notifier:
    """
    Forward notifications of the given types to a logging.Logger

    SUCCESS is logged at INFO level, the other types at their namesake level.
    """
    logger = logger or logging.getLogger('porthunt')
    shown = frozenset(types)

    def notify(log_type: LogType, message: str) -> None:
        if log_type in shown:
            logger.log(_LOG_LEVELS[log_type], message)
    return notify


def log_to_file(filepath: str, types: Iterable[LogType] = ALL_LOG_TYPES) -> Notifier:
    """Append notifications to a file, one per line"""
    logger = logging.getLogger(f'porthunt.file.{filepath}')
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    if not logger.handlers:
        handler = logging.FileHandler(filepath, encoding='utf-8')
        handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        logger.addHandler(handler)
    return log_to_logger(logger, types)


def log_to(*notifiers: Notifier) -> Notifier:
    """Fan a notification out to several notifiers"""
    def notify(log_type: LogType, message: str) -> None:
        for n in notifiers:
            n(log_type, message)
    return notify


def describe_result(result: TCPPortScanResult) -> str:
    """Human-readable line for a port result: <ip>:<port> (state) [banner] service"""
    out = f"{result.address} ({result.state.value})"
    if result.banner:
        out += f" [{result.banner.decode('utf-8', errors='replace')!r}]"
    if result.confirmed_service is not None:
        out += f" {result.confirmed_service.value}"
    if result.conn_error:
        out += f": {result.conn_error}"
    return out
