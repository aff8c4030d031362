"""
NodeLogger - nodelogger/config.py
Settings loaded from TOML and validated with Pydantic, plus directory layout.
=============================================================================
Version:     0.1
Stack:       Python 3.14 | Pydantic v2 | tomllib
Status:      Configuration layer.

Layout on disk
--------------
  <plugin_dir>/                  created at startup
  <plugin_dir>/log.txt           diagnostic log, reset at startup
  <plugin_dir>/nodeMap/          one node-map file per map id
  <plugin_dir>/nodeMap/{id}.txt
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# ================================================================================
# SCHEMAS
# ================================================================================

class KeyBindingsDef(BaseModel):
    """Key names as understood by tcod.event.KeySym (letters, F1, SPACE...)."""
    model_config = ConfigDict(frozen=True)
    toggle_pause: str = "P"
    toggle_logging: str = "T"
    set_corner: str = "C"
    undo: str = "R"
    load: str = "L"
    remove_selected: str = "F"


class NodeLoggerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    cell_size: float = Field(default=1.0, gt=0)
    progress_every: int = Field(default=10, ge=1)
    enabled_mode_id: int = 13
    plugin_dir: Path = Path("NodeLogger")
    node_map_dir_name: str = "nodeMap"
    log_file_name: str = "log.txt"
    log_level: str = "INFO"
    keys: KeyBindingsDef = Field(default_factory=KeyBindingsDef)

    @property
    def node_map_dir(self) -> Path:
        return self.plugin_dir / self.node_map_dir_name

    @property
    def log_file(self) -> Path:
        return self.plugin_dir / self.log_file_name

    def node_map_path(self, map_id: Any) -> Path:
        return self.node_map_dir / f"{map_id}.txt"


# ================================================================================
# LOADER & CACHE
# ================================================================================

DATA_DIR = Path(__file__).parent.parent / "data"
CONFIG_PATH = DATA_DIR / "nodelogger.toml"

_CONFIG_CACHE: Optional[NodeLoggerConfig] = None


def load_config(path: Path, **overrides: Any) -> NodeLoggerConfig:
    """Read one TOML file. A missing file yields the defaults."""
    data: Dict[str, Any] = {}
    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)
    data.update(overrides)
    return NodeLoggerConfig(**data)


def get_config() -> NodeLoggerConfig:
    """Loads data/nodelogger.toml. Cached globally."""
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE
    _CONFIG_CACHE = load_config(CONFIG_PATH)
    return _CONFIG_CACHE


def ensure_directories(config: NodeLoggerConfig) -> List[Path]:
    """
    Create the plugin and node-map directories if absent.
    Failures are logged and skipped. Returns the directories that exist afterwards.
    """
    ready = []
    for folder in (config.plugin_dir, config.node_map_dir):
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Error [CreateFolder]: %s: %s", folder, exc)
            continue
        ready.append(folder)
    return ready
