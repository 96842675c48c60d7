"""Tests for logging and app path helpers."""

import logging

from fiberwalk.utils import app_paths
from fiberwalk.utils.logger import FiberwalkLogger, logger


class TestAppPaths:

    def test_env_override(self, tmp_path, monkeypatch):
        """FW_OUTPUT_DIR wins and is created on demand."""
        target = tmp_path / "renders"
        monkeypatch.setenv("FW_OUTPUT_DIR", str(target))
        assert app_paths.get_output_dir() == target.resolve()
        assert target.is_dir()

    def test_default_output_path(self, tmp_path, monkeypatch):
        """Output files are named <preset>_<seed>.png."""
        monkeypatch.setenv("FW_OUTPUT_DIR", str(tmp_path))
        assert app_paths.default_output_path("drift", 42) == tmp_path.resolve() / "drift_42.png"

    def test_platform_default(self, tmp_path, monkeypatch):
        """Without the env var, renders go under the user's pictures dir."""
        monkeypatch.delenv("FW_OUTPUT_DIR", raising=False)
        monkeypatch.setattr(app_paths, "user_pictures_dir", lambda: str(tmp_path))
        assert app_paths.get_output_dir() == tmp_path.resolve() / app_paths.APP_NAME


class TestLogger:

    def test_format_message(self):
        """Component tag in brackets, details after a dash."""
        fmt = logger._format_message
        assert fmt("started") == "started"
        assert fmt("started", component="SCENE") == "[SCENE] started"
        assert fmt("failed", component="SCHED", details="boom") == "[SCHED] failed - boom"

    def test_signal_emitted(self):
        """INFO records reach the Qt signal."""
        messages = []
        logger.signal_emitter.log_message.connect(lambda msg, level, ts: messages.append((msg, level)))
        logger.info("hello", component="TEST")
        assert ("[TEST] hello", logging.INFO) in messages

    def test_debug_not_sent_to_gui(self):
        """Per-fiber DEBUG lines stay off the Qt signal."""
        messages = []
        logger.signal_emitter.log_message.connect(lambda msg, level, ts: messages.append(msg))
        logger.fiber(3, "reseeded")
        assert messages == []

    def test_log_file_gets_debug_lines(self, tmp_path):
        """A log file records DEBUG lines even when the console does not."""
        log = FiberwalkLogger()
        path = tmp_path / "fw.log"
        log.configure(log_file=str(path))
        log.fiber(1, "started", details="steps=4")
        log.close_file()
        assert "[DRIVER] Fiber 1: started - steps=4" in path.read_text()

    def test_close_file_is_idempotent(self, tmp_path):
        """Closing twice, or with no file open, is harmless."""
        log = FiberwalkLogger()
        log.close_file()
        log.configure(log_file=str(tmp_path / "a.log"))
        log.close_file()
        log.close_file()

    def test_verbose_lowers_console_level(self):
        """configure(verbose=True) lets DEBUG through to the console."""
        log = FiberwalkLogger()
        log.configure(verbose=True)
        assert log._console_handler.level == logging.DEBUG
        log.configure()
        assert log._console_handler.level == logging.INFO
