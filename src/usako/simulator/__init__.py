"""Desktop window for playing the arcade."""

from .window import GameWindow, WindowConfig

__all__ = ["GameWindow", "WindowConfig"]
