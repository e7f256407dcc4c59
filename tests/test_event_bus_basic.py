from gui.services.event_bus import EventBus, GUIEvent


def test_subscribe_and_publish_order():
    bus = EventBus()
    order = []

    def h1(e):
        order.append(("h1", e.name))

    def h2(e):
        order.append(("h2", e.name))

    bus.subscribe(GUIEvent.DOCUMENT_CHANGED, h1)
    bus.subscribe(GUIEvent.DOCUMENT_CHANGED, h2)
    evt = bus.publish(GUIEvent.DOCUMENT_CHANGED, {"theme": "neon"})
    assert order == [
        ("h1", GUIEvent.DOCUMENT_CHANGED.value),
        ("h2", GUIEvent.DOCUMENT_CHANGED.value),
    ]
    assert evt.payload == {"theme": "neon"}


def test_string_and_enum_names_share_subscribers():
    bus = EventBus()
    calls = []
    bus.subscribe("theme_selected", lambda e: calls.append(e.payload))
    bus.publish(GUIEvent.THEME_SELECTED, 1)
    assert calls == [1]
    assert bus.subscriber_count(GUIEvent.THEME_SELECTED) == 1


def test_once_subscription():
    bus = EventBus()
    calls = []
    bus.subscribe(GUIEvent.THEMES_LOADED, lambda e: calls.append(e.name), once=True)
    bus.publish(GUIEvent.THEMES_LOADED)
    bus.publish(GUIEvent.THEMES_LOADED)
    assert calls == [GUIEvent.THEMES_LOADED.value]
    assert bus.subscriber_count(GUIEvent.THEMES_LOADED) == 0


def test_unsubscribe():
    bus = EventBus()
    calls = []
    sub = bus.subscribe(GUIEvent.DOCUMENT_SAVED, lambda e: calls.append(1))
    bus.publish(GUIEvent.DOCUMENT_SAVED)
    bus.unsubscribe(sub)
    bus.publish(GUIEvent.DOCUMENT_SAVED)
    assert calls == [1]
    assert not sub.active


def test_cancelled_subscription_skipped():
    bus = EventBus()
    calls = []
    sub = bus.subscribe(GUIEvent.ERROR_OCCURRED, lambda e: calls.append(1))
    sub.cancel()
    bus.publish(GUIEvent.ERROR_OCCURRED)
    assert calls == []


def test_error_isolation():
    bus = EventBus()
    calls = []

    def bad(e):
        raise RuntimeError("boom")

    def good(e):
        calls.append("ok")

    bus.subscribe(GUIEvent.DOCUMENT_CHANGED, bad)
    bus.subscribe(GUIEvent.DOCUMENT_CHANGED, good)
    bus.publish(GUIEvent.DOCUMENT_CHANGED)
    assert calls == ["ok"]
    assert len(bus.errors) == 1
    assert isinstance(bus.errors[0][1], RuntimeError)


def test_handler_may_subscribe_during_dispatch():
    bus = EventBus()
    late = []

    def first(e):
        bus.subscribe(GUIEvent.STARTUP_COMPLETE, lambda ev: late.append(ev.name))

    bus.subscribe(GUIEvent.STARTUP_COMPLETE, first, once=True)
    bus.publish(GUIEvent.STARTUP_COMPLETE)
    assert late == []
    bus.publish(GUIEvent.STARTUP_COMPLETE)
    assert late == [GUIEvent.STARTUP_COMPLETE.value]


def test_clear():
    bus = EventBus()
    bus.subscribe(GUIEvent.DOCUMENT_CHANGED, lambda e: None)
    bus.clear()
    assert bus.subscriber_count(GUIEvent.DOCUMENT_CHANGED) == 0
