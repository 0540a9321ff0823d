"""Qt-aware controllers that host tag-jump sessions."""

from .jump_controller import JumpController

__all__ = ["JumpController"]
