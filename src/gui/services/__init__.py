"""Service layer exports.

Responsibilities:
 - Dependency/service locator (`services`)
 - EventBus publish/subscribe core
 - Editor session and widget preview registry used by the editor window

Keys for services are string-based: ``event_bus``, ``logging_service``,
``theme_library``, ``widget_previews``, ``app_config``.
"""

from .service_locator import services, ServiceLocator  # noqa: F401
from .event_bus import EventBus, GUIEvent  # noqa: F401
from .editor_session import EditorSession  # noqa: F401
from .widget_preview import WidgetPreview, WidgetPreviewRegistry  # noqa: F401

__all__ = [
    "services",
    "ServiceLocator",
    "EventBus",
    "GUIEvent",
    "EditorSession",
    "WidgetPreview",
    "WidgetPreviewRegistry",
]
