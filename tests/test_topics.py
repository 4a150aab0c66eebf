from itertools import combinations

from nuimo_bridge.topics import TopicScheme

CHANNELS = [
    "details", "battery", "rssi", "rotate", "button", "select", "hover",
    "swipeLeft", "swipeRight", "swipeUp", "swipeDown", "touchTop",
    "longTouchLeft", "display", "brightness",
]


def test_event_and_command_topics_use_prefix_and_device_id():
    topics = TopicScheme("nuimo")
    assert topics.event_topic("abc123", "battery") == "nuimo/abc123/battery"
    assert topics.command_topic("abc123", "display") == "nuimo/abc123/display"
    assert topics.details_topic("abc123") == "nuimo/abc123/details"


def test_custom_prefix():
    assert TopicScheme("home/nuimo").event_topic("x", "rotate") == "home/nuimo/x/rotate"


def test_discovery_topic_shape():
    topics = TopicScheme()
    assert (
        topics.discovery_topic("binary_sensor", "abc123", "touch")
        == "homeassistant/binary_sensor/abc123/touch/config"
    )


def test_topics_are_injective_per_device():
    topics = TopicScheme()
    produced = [topics.event_topic("abc123", c) for c in CHANNELS]
    assert len(set(produced)) == len(CHANNELS)
    for a, b in combinations(["abc123", "def456"], 2):
        assert not {topics.event_topic(a, c) for c in CHANNELS} & {
            topics.event_topic(b, c) for c in CHANNELS
        }


def test_topics_are_stable():
    assert TopicScheme().event_topic("abc", "hover") == TopicScheme().event_topic("abc", "hover")


def test_parse_inverts_command_topic():
    topics = TopicScheme("nuimo")
    assert topics.parse(topics.command_topic("abc123", "brightness")) == ("abc123", "brightness")


def test_parse_rejects_foreign_or_malformed_topics():
    topics = TopicScheme("nuimo")
    assert topics.parse("other/abc123/display") is None
    assert topics.parse("nuimo/abc123/button/select") is None
    assert topics.parse("nuimo/abc123") is None


def test_command_filter():
    assert TopicScheme("nuimo").command_filter() == "nuimo/+/+"
