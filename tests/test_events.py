import pytest

from nuimo_bridge.events import SIMPLE_EVENTS, EventRouter


@pytest.fixture
def router(device, state, mqtt, topics, publisher):
    router = EventRouter(device, state, mqtt, topics, publisher)
    router.arm()
    return router


def test_battery_event_updates_state_then_publishes_event_and_details(router, device, state, mqtt):
    device.emit("batteryLevel", 80)

    assert state.battery_level == 80
    assert mqtt.topics() == ["nuimo/c5f2a1b3d4e6/battery", "nuimo/c5f2a1b3d4e6/details"]
    assert mqtt.published[0].payload == {"level": 80}
    assert mqtt.published[1].payload["batteryLevel"] == 80
    assert not any(p.retain for p in mqtt.published)


def test_rssi_event_updates_state_and_details(router, device, state, mqtt):
    device.emit("rssi", -71)

    assert state.rssi == -71
    assert mqtt.topics() == ["nuimo/c5f2a1b3d4e6/rssi", "nuimo/c5f2a1b3d4e6/details"]
    assert mqtt.published[0].payload == {"rssi": -71}
    assert mqtt.published[1].payload["rssi"] == -71


def test_hover_proximity_is_four_decimal_string(router, device, mqtt):
    device.emit("hover", 0.123456)
    device.emit("hover", 1 / 3)

    assert mqtt.payloads("nuimo/c5f2a1b3d4e6/hover") == [
        {"proximity": "0.1235"},
        {"proximity": "0.3333"},
    ]


def test_left_right_swipes_carry_hover_flag(router, device, mqtt):
    device.emit("swipeLeft", True)
    device.emit("swipeRight", False)

    assert mqtt.payloads("nuimo/c5f2a1b3d4e6/swipeLeft") == [{"hoverSwipe": True}]
    assert mqtt.payloads("nuimo/c5f2a1b3d4e6/swipeRight") == [{"hoverSwipe": False}]


def test_up_down_swipes_have_empty_payload(router, device, mqtt):
    device.emit("swipeUp")
    device.emit("swipeDown")

    assert mqtt.payloads("nuimo/c5f2a1b3d4e6/swipeUp") == [{}]
    assert mqtt.payloads("nuimo/c5f2a1b3d4e6/swipeDown") == [{}]


@pytest.mark.parametrize("event", SIMPLE_EVENTS)
def test_simple_events_publish_empty_payload(router, device, mqtt, event):
    device.emit(event)
    assert mqtt.published[-1].topic == f"nuimo/c5f2a1b3d4e6/{event}"
    assert mqtt.published[-1].payload == {}


def test_button_press_and_release(router, device, mqtt):
    device.emit("selectDown")
    device.emit("selectUp")

    assert mqtt.payloads("nuimo/c5f2a1b3d4e6/button") == [
        {"state": "pressed"},
        {"state": "released"},
    ]


def test_rotate_delta(router, device, mqtt):
    device.emit("rotate", 1.5)
    assert mqtt.payloads("nuimo/c5f2a1b3d4e6/rotate") == [{"delta": 1.5}]


def test_rearm_does_not_duplicate_publishes(router, device, mqtt):
    router.arm()
    router.arm()
    device.emit("rotate", 2)

    assert len(mqtt.payloads("nuimo/c5f2a1b3d4e6/rotate")) == 1
    assert device.listener_count("rotate") == 1


def test_disarm_stops_publishing(router, device, mqtt):
    router.disarm()
    device.emit("select")

    assert mqtt.published == []
    assert not router.armed


def test_failing_handler_does_not_block_others(router, device, mqtt, publisher, monkeypatch):
    def broken(_state):
        raise RuntimeError("boom")

    monkeypatch.setattr(publisher, "publish_details", broken)
    device.emit("batteryLevel", 10)
    device.emit("select")

    assert "nuimo/c5f2a1b3d4e6/battery" in mqtt.topics()
    assert "nuimo/c5f2a1b3d4e6/select" in mqtt.topics()
