"""
core/logging.py 테스트
"""

import logging
from collections.abc import Iterator
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from core.constants import Paths
from core.logging import get_log_dir, get_log_file_path, setup_logging


@pytest.fixture
def restore_root_handlers() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """setup_logging 테스트"""

    def test_creates_file_handler(self, temp_dir: Path, restore_root_handlers: None) -> None:
        root = setup_logging("web", log_dir=temp_dir / "logs")

        file_handlers = [h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)]
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == temp_dir / "logs" / "web.log"
        assert logging.getLogger("aiosqlite").level == logging.WARNING

    def test_no_duplicate_handlers(self, temp_dir: Path, restore_root_handlers: None) -> None:
        setup_logging("web", log_dir=temp_dir)
        root = setup_logging("web", log_dir=temp_dir)

        assert len(root.handlers) == 2


class TestLogPaths:
    def test_web_dir(self) -> None:
        assert get_log_dir("web") == Paths.WEB_LOGS_DIR
        assert get_log_file_path("web") == Paths.WEB_LOGS_DIR / "web.log"

    def test_other_process(self) -> None:
        assert get_log_dir("script") == Paths.LOGS_DIR
