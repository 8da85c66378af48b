"""Topic utilities for MQTT."""

from models import Switch


def basic_action_topic(switch: Switch) -> str:
    """Get topic where a zigbee switch reports button actions."""
    return f"{switch.topic_prefix}/{switch.device_id}/action"


def basic_set_topic(switch: Switch) -> str:
    """Get topic to set the state of a zigbee switch button."""
    # one-button switches have no button suffix
    if switch.is_unnamed_button:
        return f"{switch.topic_prefix}/{switch.device_id}/set/state"
    return f"{switch.topic_prefix}/{switch.device_id}/set/state_{switch.button_name}"


def shelly_status_topic(switch: Switch) -> str:
    """Get Shelly relay status topic, e.g. shellies/<id>/status/switch:0."""
    return f"{switch.topic_prefix}/{switch.device_id}/status/{switch.button_name}"


def shelly_command_topic(switch: Switch) -> str:
    """Get Shelly relay command topic."""
    return f"{switch.topic_prefix}/{switch.device_id}/command/{switch.button_name}"
