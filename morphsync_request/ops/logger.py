import logging
import sys
import threading
from pathlib import Path
from typing import Dict, Optional

from ..interfaces import ILogSink

LOGGER_PREFIX = "morphsync_request"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(logs_dir: Optional[str] = None, name: str = LOGGER_PREFIX) -> logging.Logger:
    """
    Configures the library logger:
    - Console: INFO level
    - File: DEBUG level (logs_dir/debug.log), only when logs_dir is given
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers to avoid duplicates during re-runs or tests
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logs_dir:
        log_path = Path(logs_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / "debug.log", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def channel_logger_name(channel: str) -> str:
    parts = [part for part in channel.split("/") if part]
    return ".".join([LOGGER_PREFIX, *parts])


# Channel file handlers are shared by every sink writing to the same file.
# Values are [handler, reference count].
_shared_handlers: Dict[Path, list] = {}
_shared_lock = threading.Lock()


def _acquire_file_handler(logger: logging.Logger, path: Path) -> Path:
    key = path.resolve()
    with _shared_lock:
        entry = _shared_handlers.get(key)
        if entry is None:
            key.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(key, encoding="utf-8")
            handler.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(handler)
            _shared_handlers[key] = [handler, 1]
        else:
            entry[1] += 1
    return key


def _release_file_handler(logger: logging.Logger, key: Path) -> None:
    with _shared_lock:
        entry = _shared_handlers.get(key)
        if entry is None:
            return
        entry[1] -= 1
        if entry[1] > 0:
            return
        del _shared_handlers[key]
    handler = entry[0]
    logger.removeHandler(handler)
    handler.close()


class LogSink(ILogSink):
    """
    Writes messages under a channel tag such as "request/error".

    Each channel maps to its own logger (morphsync_request.request.error). When
    logs_dir is set the channel is also appended to logs_dir/<channel>.log.
    Sinks pointing at the same file share one handler, so every write lands in
    the file once no matter how many clients are alive.
    """

    def __init__(self, logs_dir: Optional[str] = None, level: int | str = logging.ERROR):
        self.logs_dir = Path(logs_dir) if logs_dir else None
        self.level = logging.getLevelName(level) if isinstance(level, str) else level
        self._file_handlers: Dict[str, Path] = {}

    def write(self, message: str, channel: str) -> None:
        logger = logging.getLogger(channel_logger_name(channel))
        if logger.level == logging.NOTSET:
            logger.setLevel(self.level)
        if self.logs_dir is not None and channel not in self._file_handlers:
            self._file_handlers[channel] = _acquire_file_handler(logger, self.channel_path(channel))
        logger.log(self.level, message)

    def channel_path(self, channel: str) -> Path:
        parts = [part for part in channel.split("/") if part]
        return self.logs_dir.joinpath(*parts[:-1], parts[-1] + ".log")

    def close(self) -> None:
        for channel, key in self._file_handlers.items():
            _release_file_handler(logging.getLogger(channel_logger_name(channel)), key)
        self._file_handlers.clear()
