import os
import time

from loguru import logger

from photo_develop.log import find_latest_log_file, init_logging


def test_init_logging_creates_folder_and_file(tmp_path):
    folder = tmp_path / "logs"
    try:
        assert init_logging(folder, level="DEBUG") == folder
        logger.info("hello from test")
        logger.complete()
    finally:
        logger.remove()
    assert folder.is_dir()
    assert find_latest_log_file(folder) is not None


def test_find_latest_log_file(tmp_path):
    assert find_latest_log_file(tmp_path) is None
    older = tmp_path / "develop_20240101.log"
    newer = tmp_path / "develop_20240102.log"
    older.write_text("a", encoding="utf-8")
    newer.write_text("b", encoding="utf-8")
    past = time.time() - 100
    os.utime(older, (past, past))
    assert find_latest_log_file(tmp_path) == newer
