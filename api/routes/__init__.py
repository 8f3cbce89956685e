"""API Routes"""

from . import chat, health, profiles, render

__all__ = ["chat", "health", "profiles", "render"]
