import pytest
from ui.renderer import Renderer

def test_renderer_initialization():
    r = Renderer(width=80, height=50, title="Test Window")
    assert r.width == 80
    assert r.height == 50
    assert r.title == "Test Window"
    assert r.root_console.width == 80
    assert r.root_console.height == 50

def test_renderer_clear():
    r = Renderer(width=80, height=50)
    r.put(0, 0, "@", (255, 255, 255))
    assert chr(r.root_console.ch[0, 0]) == "@"

    r.clear()
    assert chr(r.root_console.ch[0, 0]) == " "

def test_renderer_clips_off_screen():
    r = Renderer(width=10, height=5)
    r.put(-1, 0, "#", (0, 255, 0))
    r.put(10, 4, "#", (0, 255, 0))
    r.print_lines(0, 4, ["first", "second"])
    assert chr(r.root_console.ch[4, 0]) == "f"
