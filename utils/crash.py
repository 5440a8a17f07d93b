"""Crash handling: last-resort reporting with the game context attached."""

import json
import os
import sys
import traceback
import uuid

from utils.timestamp import format_timestamp

# Default crash log path, can be overridden by configure()
_crash_log = "logs/crash.log"

# Callable returning a dict describing the running game, set by the engine.
_context_provider = None


def configure(crash_file):
    """Set crash log file path from config."""
    global _crash_log
    _crash_log = crash_file


def set_context_provider(provider):
    """Register a zero-arg callable whose result is written with every crash."""
    global _context_provider
    _context_provider = provider


def _game_context():
    if _context_provider is None:
        return None
    try:
        return _context_provider()
    except Exception as exc:
        return {"context_error": str(exc)}


def _write_crash(record):
    """Append one crash record to the crash log. Never raises."""
    try:
        log_dir = os.path.dirname(_crash_log)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        with open(_crash_log, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")
    except Exception:
        pass


def _build_record(exc_name, exc_msg, tb, extra=None):
    record = {
        "id": uuid.uuid4().hex,
        "timestamp": format_timestamp(),
        "type": exc_name,
        "msg": exc_msg,
        "traceback": tb,
    }
    game = _game_context()
    if game:
        record["game"] = game
    if extra:
        record["context"] = extra
    return record


def log_crash(exc_type, exc_value, exc_tb):
    """sys.excepthook replacement: report to stderr and the crash log."""
    exc_name = exc_type.__name__ if exc_type else "Unknown"
    exc_msg = str(exc_value) if exc_value else ""
    tb = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    record = _build_record(exc_name, exc_msg, tb)

    sys.stderr.write(f"\n{'=' * 60}\nCRASH [{record['id']}] {record['timestamp']}\n{'=' * 60}\n")
    if "game" in record:
        sys.stderr.write(f"game: {json.dumps(record['game'], default=str)}\n")
    sys.stderr.write(f"{exc_name}: {exc_msg}\n{'-' * 60}\n{tb}{'=' * 60}\n\n")
    _write_crash(record)


def log_async_crash(exc, context_dict, logger=None):
    """Report an exception that escaped an asyncio task. Never raises."""
    exc_name = type(exc).__name__ if exc else "AsyncError"
    exc_msg = str(exc) if exc else context_dict.get("message", "Unknown")
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)) if exc else None

    if logger:
        logger.error("Async exception", error=exc_msg, task=str(context_dict.get("future", "unknown")))

    _write_crash(_build_record(exc_name, exc_msg, tb, str(context_dict)))


def create_async_handler(logger=None):
    """Create async exception handler for event loop."""
    def handler(loop, context):
        log_async_crash(context.get("exception"), context, logger)
    return handler


def install_crash_handler():
    """Install global sync exception handler."""
    sys.excepthook = log_crash
