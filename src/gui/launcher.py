"""Dedicated launcher module for `python -m gui` or external callers.

Delegates to the bootstrap (`create_app`) so service registration and
logging setup run the same way as in tests, then guards against a second
running instance before showing the editor window.
"""

from __future__ import annotations

import argparse
import logging
import sys

from gui.app.bootstrap import create_app, single_instance

_logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="yasb-theme-editor")
    parser.add_argument("--themes-dir", help="folder containing the yasb-themes tree")
    parser.add_argument("--theme", help="theme to open on startup")
    parser.add_argument("--sub", help="sub-theme to open on startup")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:  # pragma: no cover - runtime
    args = _parse_args(argv)
    ctx = create_app(headless=False, themes_dir=args.themes_dir)
    app = ctx.qt_app
    if app is None:
        _logger.error("PyQt6 is not available; cannot start the editor")
        return 1
    with single_instance() as acquired:
        if not acquired:
            print("Another theme editor instance is already running.")  # noqa: T201
            return 0
        from gui.views.theme_editor_window import ThemeEditorWindow

        win = ThemeEditorWindow()
        theme = args.theme or ctx.app_config.last_theme
        if theme:
            win.vm.select_theme(theme, args.sub or ctx.app_config.last_sub)
        if ctx.app_config.is_geometry_complete():
            win.setGeometry(
                ctx.app_config.window_x,
                ctx.app_config.window_y,
                ctx.app_config.window_w,
                ctx.app_config.window_h,
            )
        win.show()
        code = app.exec()
        geo = win.geometry()
        ctx.app_config.window_x, ctx.app_config.window_y = geo.x(), geo.y()
        ctx.app_config.window_w, ctx.app_config.window_h = geo.width(), geo.height()
        ctx.app_config.maximized = win.isMaximized()
        ctx.app_config.last_theme = win.vm.session.theme
        ctx.app_config.last_sub = win.vm.session.sub
        if args.themes_dir:
            ctx.app_config.themes_dir = args.themes_dir
        return code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
