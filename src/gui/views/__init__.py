"""GUI view layer.

Exports:
 - ThemeEditorWindow
"""

from .theme_editor_window import ThemeEditorWindow  # noqa: F401

__all__ = ["ThemeEditorWindow"]
