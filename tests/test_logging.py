from __future__ import annotations

from pathlib import Path

import pytest

from agentcloud.observability.logger import logger
from agentcloud.observability.logging import LogConfig, setup_logging, teardown_logging

pytestmark = [pytest.mark.unit]


@pytest.fixture
def log_file(tmp_path: Path):
    path = tmp_path / "logs" / "agentcloud.log"
    ids = setup_logging(LogConfig(file=str(path), console=False))
    yield path
    teardown_logging(ids)


class TestLogging:
    def test_file_handler_receives_bound_context(self, log_file: Path):
        log = logger.bind(component="instance", instance_id="i-1")
        log.info("Node {node} is running", node="n-1")

        text = log_file.read_text()
        assert "Node n-1 is running [component=instance instance_id=i-1]" in text
        assert "| agentcloud:" in text

    def test_exception_includes_traceback(self, log_file: Path):
        try:
            raise RuntimeError("nova unavailable")
        except RuntimeError:
            logger.exception("Destroy failed")

        text = log_file.read_text()
        assert "Destroy failed" in text
        assert "RuntimeError: nova unavailable" in text

    def test_braces_in_plain_messages_are_kept(self, log_file: Path):
        logger.error("Invalid request body {'server': {}}")
        assert "{'server': {}}" in log_file.read_text()

    def test_no_file_handler(self, tmp_path: Path):
        ids = setup_logging(LogConfig(file=None, console=False))
        try:
            assert ids == []
        finally:
            teardown_logging(ids)

    def test_missing_caller_frame_logs_under_root(self, log_file: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr("agentcloud.observability.logger._caller", lambda: None)
        logger.bind(instance_id="i-9").warning("Node {node} lost", node="n-2")

        text = log_file.read_text()
        assert "Node n-2 lost [instance_id=i-9]" in text
        assert "| agentcloud:" in text

    def test_disable_silences_library(self, log_file: Path):
        logger.disable()
        try:
            logger.info("hidden message")
        finally:
            logger.enable()
        assert "hidden message" not in log_file.read_text()
