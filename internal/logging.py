import asyncio
import json
import os
import sys
import threading
from enum import IntEnum
from utils.timestamp import format_timestamp

class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

RESERVED_KEYS = ("timestamp", "level", "msg", "err", "ctx")

_logger = None
_logger_lock = threading.Lock()

class StructuredLogger:
    """JSON-lines logger writing to stderr; bound fields ride on every record."""

    def __init__(self, level=LogLevel.INFO, fields=None):
        self.level = level
        self.fields = fields or {}

    def bind(self, **fields):
        """Child logger sharing the level with extra context fields."""
        return StructuredLogger(self.level, {**self.fields, **fields})

    def _emit(self, log_level, message, error=None, **kwargs):
        if log_level < self.level:
            return
        try:
            extra = {**self.fields, **kwargs}
            # Fields named like a record key (a game "level") move under "ctx".
            clashes = {key: extra.pop(key) for key in RESERVED_KEYS if key in extra}
            record = {"timestamp": format_timestamp(), "level": log_level.name, "msg": message, **extra}
            if clashes:
                record["ctx"] = clashes
            if error:
                record["err"] = str(error)
            print(json.dumps(record, default=str), file=sys.stderr, flush=True)
        except (TypeError, ValueError, OSError):
            pass

    def debug(self, message, **kwargs):
        self._emit(LogLevel.DEBUG, message, **kwargs)

    def info(self, message, **kwargs):
        self._emit(LogLevel.INFO, message, **kwargs)

    def warn(self, message, error=None, **kwargs):
        self._emit(LogLevel.WARN, message, error, **kwargs)

    def error(self, message, error=None, **kwargs):
        self._emit(LogLevel.ERROR, message, error, **kwargs)

    @classmethod
    def configure(cls, min_level=LogLevel.INFO):
        global _logger
        with _logger_lock:
            _logger = cls(min_level)

def get_logger():
    global _logger
    if _logger is None:
        with _logger_lock:
            if _logger is None:
                _logger = StructuredLogger()
    return _logger


class AsyncFileLogger:
    """Queue-backed JSON-lines sink for bus traffic.

    Game events are always queued; state snapshots arrive every tick, so only
    one in ``state_every`` is kept.
    """

    def __init__(self, file_path, queue_size=1000, state_every=30):
        self.path = file_path
        self.queue = asyncio.Queue(maxsize=queue_size)
        self.state_every = max(1, state_every)
        self._task = None
        self._stop = asyncio.Event()
        self._file_missing_logged = False
        self._states_seen = 0
        self.written = 0
        self.dropped = 0
        self.sampled_out = 0

    def try_log(self, kind, data):
        if kind == "state":
            self._states_seen += 1
            if (self._states_seen - 1) % self.state_every:
                self.sampled_out += 1
                return False
        try:
            self.queue.put_nowait({"timestamp": format_timestamp(), "kind": kind, "data": data})
            return True
        except asyncio.QueueFull:
            self.dropped += 1
        return False

    async def start(self):
        if self._task:
            return
        dir_path = os.path.dirname(self.path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)
        self._stop.clear()
        self._task = asyncio.create_task(self._run())

    async def stop(self):
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

    def get_stats(self):
        return {
            "queued": self.queue.qsize(),
            "written": self.written,
            "dropped": self.dropped,
            "sampled_out": self.sampled_out,
        }

    def _write(self, file, record):
        file.write(json.dumps(record, default=str) + "\n")
        self.written += 1

    async def _run(self):
        file = open(self.path, "a")
        try:
            while not self._stop.is_set():
                try:
                    record = await asyncio.wait_for(self.queue.get(), timeout=0.5)
                except asyncio.TimeoutError:
                    continue
                if not os.path.exists(self.path):
                    # Log file removed underneath us; drop rather than grow the queue.
                    if not self._file_missing_logged:
                        get_logger().warn("Log file deleted, logging disabled", path=self.path)
                        self._file_missing_logged = True
                    self.dropped += 1
                    continue
                try:
                    self._write(file, record)
                    file.flush()
                except OSError as exc:
                    self.dropped += 1
                    get_logger().warn("log write failed", error=exc, path=self.path)
            while not self.queue.empty():
                try:
                    self._write(file, self.queue.get_nowait())
                except (asyncio.QueueEmpty, OSError):
                    break
            file.flush()
        finally:
            file.close()
