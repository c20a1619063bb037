"""Tests for the standard handlers and the run_post command line.

Covers the default event-to-G-code mapping on a complete trace, then the
CLI: written files, dry run, event dump and failure exit codes.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from trace_post.handlers.standard import (
    STANDARD_HANDLERS,
    register_standard_handlers,
)
from trace_post.program.program import Program
from trace_post.scripts.run_post import main

TRACE = """(0)@start_of_file
program_number: '1234'
(1)@absolute_mode
(2)@machine_plane machine_plane: xy
(3)@change_tool tool_id_string: 'D10' tool_number: 3
(4)@m_feed_spin feed: 1200 spin: 8000rpm spin_direction: cw
(5)@message message: 'roughing pass'
(6)@rapid_move
xpos: 0 ypos: 0 zpos: 100
(7)@line
xpos: 10 ypos: 0 zpos: 100 feed: 600
(8)@end_of_file
"""

EXPECTED = [
    "N10 G90",
    "N20 G17",
    'N30 T="D10" M6',
    "N40 S8000 M3",
    "N50 ; roughing pass",
    "N60 G0 X0 Y0 Z100",
    "N70 G1 X10 F600",
    "N80 M30",
]


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture()
def trace_file(tmp_path: Path) -> Path:
    path = tmp_path / "part.trace"
    path.write_text(TRACE, encoding="utf-8")
    return path


def _run(text: str) -> list[str]:
    program = Program.from_text(text)
    register_standard_handlers(program)
    program.process()
    return program.generate().splitlines()


# ---------------------------------------------------------------------------
# Standard handlers
# ---------------------------------------------------------------------------


class TestStandardHandlers:
    def test_full_trace(self) -> None:
        assert _run(TRACE) == EXPECTED

    def test_registers_every_handler(self) -> None:
        program = Program()
        register_standard_handlers(program)
        for name, listener in STANDARD_HANDLERS.items():
            assert program.listeners(name) == [listener]

    def test_tool_number_fallback(self) -> None:
        assert _run("(0)@change_tool tool_number: 3") == ['N10 T="3" M6']

    def test_change_tool_without_tool_is_skipped(self) -> None:
        assert _run("(0)@change_tool") == []

    def test_feed_spin_without_direction(self) -> None:
        assert _run("(0)@m_feed_spin spin: 12000") == ["N10 S12000"]

    @pytest.mark.parametrize("direction", ["forward", "backward"])
    def test_feed_direction_skipped(self, direction: str, caplog) -> None:
        trace = f"(0)@m_feed_spin spin: 8000rpm spin_direction: {direction}"
        with caplog.at_level(logging.WARNING):
            assert _run(trace) == ["N10 S8000"]
        assert "not a spindle direction" in caplog.text

    def test_repeated_moves_are_suppressed(self) -> None:
        trace = (
            "(0)@rapid_move xpos: 0 ypos: 0 zpos: 5\n"
            "(1)@rapid_move xpos: 0 ypos: 0 zpos: 5\n"
            "(2)@line xpos: 0 ypos: 0 zpos: -1 feed: 200\n"
            "(3)@line xpos: 4 ypos: 0 zpos: -1 feed: 200\n"
        )
        assert _run(trace) == [
            "N10 G0 X0 Y0 Z5",
            "N20 G1 Z-1 F200",
            "N30 X4",
        ]

    def test_unhandled_events_write_nothing(self) -> None:
        assert _run("(0)@start_of_file\n(1)@comment_block foo: 1") == []


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


class TestRunPost:
    def test_writes_main_program(self, trace_file: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        assert main([str(trace_file), "-o", str(out_dir)]) == 0

        written = (out_dir / "main.MPF").read_text(encoding="utf-8")
        assert written == "\n".join(EXPECTED) + "\n"

    def test_dry_run_prints(
        self, trace_file: Path, tmp_path: Path, capsys,
    ) -> None:
        out_dir = tmp_path / "out"
        assert main([str(trace_file), "--dry-run", "-o", str(out_dir)]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out[0] == "--- main ---"
        assert out[1:] == EXPECTED
        assert not out_dir.exists()

    def test_dump_events(self, trace_file: Path, tmp_path: Path) -> None:
        dump = tmp_path / "events.json"
        assert main([str(trace_file), "--dry-run", "--dump-events", str(dump)]) == 0

        events = json.loads(dump.read_text(encoding="utf-8"))
        assert len(events) == 9
        assert events[0] == {
            "_eventName": "StartOfFile",
            "_index": 0,
            "program_number": "1234",
        }
        assert events[4]["spin"] == 8000
        assert events[4]["spin_direction"] == "cw"

    def test_custom_config(self, trace_file: Path, tmp_path: Path) -> None:
        cfg = tmp_path / "post.yaml"
        cfg.write_text(
            "numbering: {enabled: false}\n"
            "files: {main_name: PART, main_extension: .nc}\n",
            encoding="utf-8",
        )
        out_dir = tmp_path / "out"
        assert main([str(trace_file), "-c", str(cfg), "-o", str(out_dir)]) == 0

        lines = (out_dir / "PART.nc").read_text(encoding="utf-8").splitlines()
        assert lines[0] == "G90"
        assert lines[-1] == "M30"

    def test_missing_trace_fails(self, tmp_path: Path) -> None:
        assert main([str(tmp_path / "missing.trace"), "--dry-run"]) == 1

    def test_bad_config_fails(
        self, trace_file: Path, tmp_path: Path, capsys,
    ) -> None:
        cfg = tmp_path / "post.yaml"
        cfg.write_text("numbering: {increment: 0}\n", encoding="utf-8")
        assert main([str(trace_file), "-c", str(cfg)]) == 1
        assert "Error loading config" in capsys.readouterr().err

    def test_handler_error_fails(self, tmp_path: Path) -> None:
        trace = tmp_path / "bad.trace"
        trace.write_text("(0)@machine_plane machine_plane: uv\n", encoding="utf-8")
        assert main([str(trace), "--dry-run"]) == 1

    def test_log_file_carries_trace_context(
        self, trace_file: Path, tmp_path: Path,
    ) -> None:
        log_file = tmp_path / "logs" / "post.log"
        assert main([str(trace_file), "--dry-run", "--log-file", str(log_file)]) == 0

        text = log_file.read_text(encoding="utf-8")
        assert "trace=part.trace" in text
        assert "Processed 9 events" in text
