import logging
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError
from nodelogger.config import (
    NodeLoggerConfig,
    ensure_directories,
    get_config,
    load_config,
)
from nodelogger.logging_config import setup_logging

def test_shipped_config():
    config = get_config()
    assert config.cell_size == 1.0
    assert config.progress_every == 10
    assert config.enabled_mode_id == 13
    assert config.keys.toggle_logging == "T"
    assert get_config() is config

def test_load_config_missing_file_uses_defaults():
    config = load_config(Path("does/not/exist.toml"))
    assert config == NodeLoggerConfig()

def test_load_config_from_toml_with_overrides():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "nl.toml"
        path.write_text('cell_size = 0.5\n[keys]\nundo = "U"\n', encoding="utf-8")
        config = load_config(path, progress_every=3)
    assert config.cell_size == 0.5
    assert config.progress_every == 3
    assert config.keys.undo == "U"
    assert config.keys.load == "L"

def test_config_validation():
    with pytest.raises(ValidationError):
        NodeLoggerConfig(cell_size=0)
    with pytest.raises(ValidationError):
        NodeLoggerConfig(progress_every=0)

def test_node_map_layout():
    config = NodeLoggerConfig(plugin_dir=Path("plug"))
    assert config.node_map_path(42) == Path("plug") / "nodeMap" / "42.txt"
    assert config.log_file == Path("plug") / "log.txt"

def test_ensure_directories_is_idempotent():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = NodeLoggerConfig(plugin_dir=Path(tmpdir) / "NodeLogger")
        assert ensure_directories(config) == [config.plugin_dir, config.node_map_dir]
        assert ensure_directories(config) == [config.plugin_dir, config.node_map_dir]
        assert config.node_map_dir.is_dir()

def test_ensure_directories_logs_failures(caplog):
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = Path(tmpdir) / "NodeLogger"
        blocker.write_text("not a folder", encoding="utf-8")
        config = NodeLoggerConfig(plugin_dir=blocker)
        with caplog.at_level(logging.ERROR, logger="nodelogger.config"):
            assert ensure_directories(config) == []
    assert "CreateFolder" in caplog.text

def test_setup_logging_resets_log_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        log_file = Path(tmpdir) / "log.txt"
        log_file.write_text("stale line\n", encoding="utf-8")
        setup_logging(logging.INFO, log_file)
        try:
            logging.getLogger("nodelogger.test").info("fresh line")
            content = log_file.read_text(encoding="utf-8")
        finally:
            for name in ("nodelogger", "ui"):
                logger = logging.getLogger(name)
                for handler in list(logger.handlers):
                    handler.close()
                    logger.removeHandler(handler)
    assert "stale line" not in content
    assert "Logging initialized." in content
    assert "fresh line" in content

def test_setup_logging_again_closes_previous_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        first_file = Path(tmpdir) / "first.txt"
        second_file = Path(tmpdir) / "second.txt"
        setup_logging(logging.INFO, first_file)
        first = [h for h in logging.getLogger("nodelogger").handlers if isinstance(h, logging.FileHandler)]
        try:
            setup_logging(logging.INFO, second_file)
            assert first and all(h.stream is None for h in first)
            for name in ("nodelogger", "ui"):
                files = [h for h in logging.getLogger(name).handlers if isinstance(h, logging.FileHandler)]
                assert [Path(h.baseFilename).name for h in files] == ["second.txt"]
        finally:
            for name in ("nodelogger", "ui"):
                logger = logging.getLogger(name)
                for handler in list(logger.handlers):
                    logger.removeHandler(handler)
                    handler.close()
