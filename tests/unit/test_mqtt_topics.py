"""Topic ownership rule for non-superuser MQTT clients."""

import pytest

from src.iotauth.services.mqtt_service import topic_owned_by

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "topic",
    ["users/sensor-1/temp", "users/sensor-1/a/b/c", "users/sensor-1/#", "users/sensor-1/"],
)
def test_own_subtree(topic: str) -> None:
    assert topic_owned_by(topic, "sensor-1")


@pytest.mark.parametrize(
    "topic",
    [
        "users/sensor-1",
        "users/sensor-10/temp",
        "users/sensor/temp",
        "Users/sensor-1/temp",
        "/users/sensor-1/temp",
        "users/+/temp",
        "users/#",
        "devices/sensor-1/temp",
    ],
)
def test_everything_else(topic: str) -> None:
    assert not topic_owned_by(topic, "sensor-1")
