"""Theme editor GUI public API.

Small surface for external callers (launcher, tests) to reach the GUI
infrastructure without depending on deep module paths. Importing this
package does not create a QApplication.
"""

from __future__ import annotations

from .services.service_locator import (  # noqa: F401
    services,
    ServiceLocator,
    ServiceAlreadyRegisteredError,
    ServiceNotFoundError,
)
from .services.event_bus import (  # noqa: F401
    EventBus,
    GUIEvent,
    Event,
)
from .app.bootstrap import create_app  # noqa: F401

__all__ = [
    "services",
    "ServiceLocator",
    "ServiceAlreadyRegisteredError",
    "ServiceNotFoundError",
    "EventBus",
    "GUIEvent",
    "Event",
    "create_app",
]
