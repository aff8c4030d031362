"""
NodeLogger - run.py
Entry point for the interactive reference host.
"""

import sys
from functools import partial
from pathlib import Path

# Ensure we can import the nodelogger packages
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))

from nodelogger.config import ensure_directories, get_config
from nodelogger.logging_config import setup_logging
from ui.renderer import Renderer
from ui.states import Engine
from ui.screens import NodeLoggingScreen

def main():
    config = get_config()
    ensure_directories(config)
    setup_logging(config.log_level, config.log_file)

    renderer = Renderer(width=80, height=50, title="NodeLogger")
    engine = Engine(renderer=renderer, initial_state_cls=partial(NodeLoggingScreen, config=config))
    engine.run()

if __name__ == "__main__":
    main()
