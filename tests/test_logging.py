"""Unit tests for the structured and file loggers."""

import asyncio
import json

import pytest

from internal.logging import AsyncFileLogger, LogLevel, StructuredLogger


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_record_is_json(self, capsys):
        """Records are single JSON lines on stderr."""
        StructuredLogger(LogLevel.INFO).info("game started", width=800)
        record = json.loads(capsys.readouterr().err)
        assert record["msg"] == "game started"
        assert record["level"] == "INFO"
        assert record["width"] == 800

    def test_bound_fields(self, capsys):
        """Bound fields ride on every record of the child."""
        log = StructuredLogger(LogLevel.INFO).bind(session="abc123")
        log.warn("layout underfilled", level_no=4)
        record = json.loads(capsys.readouterr().err)
        assert record["session"] == "abc123"
        assert record["level_no"] == 4

    def test_game_level_field(self, capsys):
        """A level= field never clashes with the severity."""
        StructuredLogger(LogLevel.INFO).info("level complete", level=2, score=210)
        record = json.loads(capsys.readouterr().err)
        assert record["level"] == "INFO"
        assert record["ctx"] == {"level": 2}
        assert record["score"] == 210

    def test_bound_level_field(self, capsys):
        """Clashing fields survive through bind and warn."""
        log = StructuredLogger(LogLevel.INFO).bind(session="abc", level=3)
        log.warn("layout underfilled", error=ValueError("cramped"))
        record = json.loads(capsys.readouterr().err)
        assert record["level"] == "WARN"
        assert record["ctx"] == {"level": 3}
        assert record["err"] == "cramped"

    def test_error_attached(self, capsys):
        """Errors are stringified under err."""
        StructuredLogger(LogLevel.INFO).error("tick fail", error=ValueError("bad"))
        record = json.loads(capsys.readouterr().err)
        assert record["err"] == "bad"

    def test_level_filter(self, capsys):
        """Records below the level are dropped."""
        StructuredLogger(LogLevel.INFO).debug("power-up expired")
        assert capsys.readouterr().err == ""


class TestAsyncFileLogger:
    """Tests for AsyncFileLogger."""

    @pytest.mark.asyncio
    async def test_state_records_sampled(self, tmp_path):
        """Only one in state_every snapshots is queued; events always are."""
        logger = AsyncFileLogger(str(tmp_path / "game.log"), state_every=3)
        kept = [logger.try_log("state", {"tick": tick}) for tick in range(7)]
        assert kept == [True, False, False, True, False, False, True]
        assert logger.try_log("event", {"kind": "collected"}) is True

        stats = logger.get_stats()
        assert stats["queued"] == 4
        assert stats["sampled_out"] == 4

    @pytest.mark.asyncio
    async def test_full_queue_drops(self, tmp_path):
        """A full queue counts drops instead of blocking."""
        logger = AsyncFileLogger(str(tmp_path / "game.log"), queue_size=1)
        logger.try_log("event", {"kind": "started"})
        assert logger.try_log("event", {"kind": "paused"}) is False
        assert logger.get_stats()["dropped"] == 1

    @pytest.mark.asyncio
    async def test_writes_lines(self, tmp_path):
        """Queued records are written as JSON lines."""
        path = tmp_path / "logs" / "game.log"
        logger = AsyncFileLogger(str(path))
        await logger.start()
        logger.try_log("event", {"kind": "level_complete", "level": 2})
        await asyncio.sleep(0.05)
        await logger.stop()

        lines = path.read_text().splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["kind"] == "event"
        assert record["data"]["level"] == 2
        assert logger.get_stats()["written"] == 1
