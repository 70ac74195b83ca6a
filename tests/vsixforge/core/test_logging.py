# tests/vsixforge/core/test_logging.py
from __future__ import annotations

import json
import logging

from vsixforge.core.logging import (
    clearLogContext,
    configureLogging,
    getLogContext,
    getProcessorLogger,
    setLogContext,
)
from vsixforge.core.logging.formatters import DevFormatter, JsonFormatter


def _record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("vsixforge.test", level, __file__, 1, msg, None, None)


def test_setLogContext_merges_and_skips_none():
    setLogContext(projectRoot="/work/ext", phase="collect")
    setLogContext(phase="process", projectRoot=None)
    assert getLogContext() == {"projectRoot": "/work/ext", "phase": "process"}

    clearLogContext()
    assert getLogContext() is None


def test_devFormatter_appends_context():
    setLogContext(projectRoot="/work/ext", phase="write")
    out = DevFormatter().format(_record("Packaged"))
    assert out == "INFO: [vsixforge.test] Packaged [/work/ext/write]"


def test_devFormatter_without_context():
    clearLogContext()
    assert DevFormatter().format(_record("plain")) == "INFO: [vsixforge.test] plain"


def test_jsonFormatter_emits_one_line_json():
    setLogContext(phase="assemble")
    line = JsonFormatter().format(_record("rendered", logging.WARNING))
    assert "\n" not in line
    payload = json.loads(line)
    assert payload["level"] == "warning"
    assert payload["msg"] == "rendered"
    assert payload["ctx"] == {"phase": "assemble"}


def test_configureLogging_installs_console_handler():
    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        configureLogging(devMode=True)
        assert root.level == logging.DEBUG
        assert any(isinstance(h.formatter, DevFormatter) for h in root.handlers)
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])


def test_getProcessorLogger_namespace():
    assert getProcessorLogger("tags").name == "vsixforge.processors.tags"
