import json
import logging

import pytest

from gui.services.logging_service import LoggingService, configure_logging, get_logging_service
from gui.services.service_locator import services
from gui.services.event_bus import EventBus, GUIEvent


@pytest.fixture()
def setup_logging(isolated_services):
    bus = EventBus()
    services.register("event_bus", bus, allow_override=True)
    svc = LoggingService(capacity=5)
    services.register("logging_service", svc, allow_override=True)
    svc.attach_root()
    yield svc, bus
    svc.detach_root()


def test_logging_capture_and_retrieve(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("parsing.widget_parser").info("Parsed 3 total widgets")
    assert any(e.message == "Parsed 3 total widgets" for e in svc.recent())
    assert get_logging_service() is svc


def test_logging_capacity_eviction(setup_logging):
    svc, _ = setup_logging
    for i in range(10):
        logging.getLogger("cap").info("M%d", i)
    recents = svc.recent()
    assert len(recents) == 5
    assert recents[0].message.endswith("5")
    assert [e.message for e in svc.recent(2)] == ["M8", "M9"]


def test_logging_filtering(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("parsing.bar_parser").debug("Parsed 2 bars")
    logging.getLogger("services.theme_library").info("Wrote config.yaml")
    info_only = svc.filter(level="INFO")
    assert info_only and all(e.level == "INFO" for e in info_only)
    parsing = svc.filter(name_contains="parsing")
    assert parsing and all("parsing" in e.name for e in parsing)


def test_logging_event_emission(setup_logging):
    svc, bus = setup_logging
    payloads = []
    bus.subscribe(GUIEvent.LOG_RECORD_ADDED, lambda evt: payloads.append(evt.payload))
    logging.getLogger("parsing.widget_parser").warning('Widget "x" has no type')
    assert payloads[-1] == {
        "level": "WARNING",
        "name": "parsing.widget_parser",
        "message": 'Widget "x" has no type',
    }


def test_explicit_bus_wins_over_registry(setup_logging):
    _, registered = setup_logging
    own = EventBus()
    seen = []
    own.subscribe(GUIEvent.LOG_RECORD_ADDED, lambda evt: seen.append(evt.payload["message"]))
    svc = LoggingService(event_bus=own)
    svc.attach_root()
    try:
        logging.getLogger("x").warning("hello")
    finally:
        svc.detach_root()
    assert seen == ["hello"]


def test_export_jsonl(setup_logging, tmp_path):
    svc, _ = setup_logging
    logging.getLogger("a").info("one")
    logging.getLogger("a").warning("two")
    path = tmp_path / "out" / "logs.jsonl"
    assert svc.export_jsonl(str(path), level="WARNING") == 1
    rows = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert rows[0]["message"] == "two"


def test_clear(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("a").info("one")
    svc.clear()
    assert svc.recent() == []


def test_configure_logging_is_idempotent():
    root = logging.getLogger()
    configure_logging("DEBUG")
    configure_logging("not-a-level")
    marked = [h for h in root.handlers if getattr(h, "_themeselector_console", False)]
    assert len(marked) == 1
    assert root.level <= logging.DEBUG
