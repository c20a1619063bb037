"""Tests for the filesystem and logging helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from trace_post.utils import fs
from trace_post.utils.logging_config import (
    ContextFormatter,
    pop_context,
    push_context,
    setup_logging,
)


@pytest.fixture()
def record() -> logging.LogRecord:
    return logging.LogRecord(
        "trace_post.test", logging.INFO, __file__, 1, "Processed %d events",
        (3,), None,
    )


@pytest.fixture(autouse=True)
def _clean_context():
    yield
    pop_context()


# ---------------------------------------------------------------------------
# fs
# ---------------------------------------------------------------------------


class TestFs:
    def test_atomic_write_text(self, tmp_path: Path) -> None:
        path = tmp_path / "a" / "main.MPF"
        fs.atomic_write_text(path, "N10 G0\n")
        assert path.read_text(encoding="utf-8") == "N10 G0\n"
        assert list(path.parent.iterdir()) == [path]

    def test_atomic_write_replaces(self, tmp_path: Path) -> None:
        path = tmp_path / "main.MPF"
        fs.atomic_write_text(path, "old")
        fs.atomic_write_text(path, "new")
        assert path.read_text(encoding="utf-8") == "new"

    def test_atomic_json_dump(self, tmp_path: Path) -> None:
        path = tmp_path / "events.json"
        fs.atomic_json_dump([{"_eventName": "Line", "_index": 0}], path)
        assert json.loads(path.read_text(encoding="utf-8")) == [
            {"_eventName": "Line", "_index": 0}
        ]

    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("numbering:\n  start: 1\n", encoding="utf-8")
        assert fs.load_yaml(path) == {"numbering": {"start": 1}}

    def test_load_yaml_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            fs.load_yaml(tmp_path / "missing.yaml")

    def test_ensure_dir(self, tmp_path: Path) -> None:
        path = fs.ensure_dir(tmp_path / "x" / "y")
        assert path.is_dir()
        assert fs.ensure_dir(path) == path


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class TestLogging:
    def test_human_format_includes_context(self, record) -> None:
        push_context(app="run_post")
        line = ContextFormatter("human", use_color=False).format(record)
        assert "| INFO" in line
        assert "app=run_post |" in line
        assert line.endswith("Processed 3 events")

    def test_json_format(self, record) -> None:
        push_context(app="run_post", trace="part.trace")
        data = json.loads(ContextFormatter("json").format(record))
        assert data["lvl"] == "INFO"
        assert data["msg"] == "Processed 3 events"
        assert data["app"] == "run_post"
        assert data["trace"] == "part.trace"

    def test_pop_context_keys(self, record) -> None:
        push_context(app="run_post", trace="part.trace")
        pop_context(["trace"])
        line = ContextFormatter("human", use_color=False).format(record)
        assert "trace=" not in line
        assert "app=run_post" in line

    def test_setup_logging_replaces_own_handlers(self, tmp_path: Path) -> None:
        root = logging.getLogger()
        before, level = list(root.handlers), root.level
        log_file = tmp_path / "logs" / "run.log"
        try:
            setup_logging("DEBUG")
            handlers = setup_logging("WARNING", str(log_file))
            assert len(handlers) == 2
            assert isinstance(handlers[1], logging.FileHandler)
            assert root.level == logging.WARNING
            assert [h for h in root.handlers if h not in before] == handlers
            # Handlers installed by others are left alone.
            assert all(h in root.handlers for h in before)

            push_context(trace="part.trace")
            logging.getLogger("trace_post.test").warning("Subprogram left open")
            handlers[1].flush()
            text = log_file.read_text(encoding="utf-8")
            assert "trace=part.trace | Subprogram left open" in text
        finally:
            for handler in list(root.handlers):
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()
            root.setLevel(level)
