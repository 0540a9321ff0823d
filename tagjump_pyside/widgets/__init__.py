"""Reusable PySide widgets for tag-jump navigation."""

from .marker_overlay import TagMarkerOverlay

__all__ = ["TagMarkerOverlay"]
