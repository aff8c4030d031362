import tempfile
from functools import partial
from pathlib import Path
from types import SimpleNamespace

import pytest
import tcod
from nodelogger.config import NodeLoggerConfig, ensure_directories
from nodelogger.grid import GridCoordinate as G
from nodelogger.session import Command, SessionState
from ui.renderer import Renderer
from ui.screens import NodeLoggingScreen, build_key_map, keysym_for
from ui.states import Engine

def _key(sym):
    return SimpleNamespace(sym=sym)

@pytest.fixture
def screen():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = NodeLoggerConfig(plugin_dir=Path(tmpdir) / "NodeLogger")
        ensure_directories(config)
        engine = Engine(Renderer(width=60, height=30), partial(NodeLoggingScreen, config=config))
        yield engine.active_state

def test_default_key_map_covers_every_command():
    key_map = build_key_map(NodeLoggerConfig())
    assert set(key_map.values()) == set(Command)
    assert key_map[keysym_for("T")] is Command.TOGGLE_LOGGING
    assert key_map[keysym_for("f")] is Command.REMOVE_SELECTED

def test_unknown_key_name():
    with pytest.raises(ValueError):
        keysym_for("NOT_A_KEY")

def test_keyboard_drives_session(screen):
    keys = {command: sym for sym, command in screen.key_map.items()}
    screen.ev_keydown(_key(keys[Command.TOGGLE_LOGGING]))
    screen.on_tick()
    assert screen.session.state is SessionState.LOGGING
    assert screen.markers.node_cells() == [G(0, 0, 0)]

    screen.ev_keydown(_key(tcod.event.KeySym.RIGHT))
    screen.ev_keydown(_key(tcod.event.KeySym.RIGHT))
    screen.on_tick()
    assert G(1, 0, 0) in screen.session.context.cells

def test_remove_selected_targets_cell_under_observer(screen):
    keys = {command: sym for sym, command in screen.key_map.items()}
    screen.ev_keydown(_key(keys[Command.TOGGLE_LOGGING]))
    screen.on_tick()
    screen.ev_keydown(_key(keys[Command.TOGGLE_PAUSE]))
    assert screen.selected_positions() == [(0.5, 0.5, 0.5)]

    screen.ev_keydown(_key(keys[Command.REMOVE_SELECTED]))
    assert len(screen.session.context.cells) == 0
    assert screen.selected_positions() == []

def test_notices_reach_message_log(screen):
    assert "Practice mode detected, NodeLogging enabled!" in screen.messages

def test_render_does_not_fail(screen):
    keys = {command: sym for sym, command in screen.key_map.items()}
    screen.ev_keydown(_key(keys[Command.TOGGLE_LOGGING]))
    screen.on_tick()
    renderer = Renderer(width=60, height=30)
    screen.on_render(renderer)
    map_h = 30 - 6 - 3
    assert chr(renderer.root_console.ch[map_h // 2, 30]) == "@"

def test_escape_stops_engine(screen):
    screen.ev_keydown(_key(tcod.event.KeySym.ESCAPE))
    assert screen.engine.running is False

def test_host_mode_follows_configured_practice_mode():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = NodeLoggerConfig(plugin_dir=Path(tmpdir) / "NodeLogger", enabled_mode_id=4)
        ensure_directories(config)
        engine = Engine(Renderer(width=60, height=30), partial(NodeLoggingScreen, config=config))
        screen = engine.active_state
        assert screen.mode_id() == 4
        assert screen.session.enabled is True

        other = NodeLoggingScreen(engine, config, mode_id=13)
        assert other.session.enabled is False
