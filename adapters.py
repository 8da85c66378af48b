"""Vendor adapters: translate switch MQTT messages to/from (button, state) pairs.

Every vendor is one entry of ``ADAPTERS``; adding a vendor means adding one
``VendorAdapter`` built from four plain functions.
"""

import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from constants import (
    BUTTON_SEPARATOR,
    SHELLY_OUTPUT_FIELD,
    SHELLY_PAYLOAD_OFF,
    SHELLY_PAYLOAD_ON,
    UNNAMED_BUTTON,
)
from models import MqttCommand, NormalizedState, Switch, VendorKind
from topics import basic_action_topic, basic_set_topic, shelly_command_topic, shelly_status_topic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VendorAdapter:
    """Codec of one vendor protocol."""
    subscription_topic: Callable[[Switch], str]
    decode: Callable[[Switch, str, str], Optional[NormalizedState]]
    command_topic: Callable[[Switch], str]
    encode: Callable[[Switch, str], Optional[str]]

    def command(self, switch: Switch, target_state: str) -> Optional[MqttCommand]:
        """Build the command that drives ``switch`` to ``target_state``, None if the vendor has no such state."""
        payload = self.encode(switch, target_state)
        if payload is None:
            return None
        return MqttCommand(topic=self.command_topic(switch), payload=payload)


def _parse_compound_token(payload: str) -> Optional[NormalizedState]:
    """
    Zigbee action payloads look like "ON_left" (state, button) or just "ON"
    for one-button switches. Only the first separator divides the fields.
    """
    if not payload:
        return None
    if BUTTON_SEPARATOR not in payload:
        payload = f"{payload}{BUTTON_SEPARATOR}{UNNAMED_BUTTON}"
    state, _, button = payload.partition(BUTTON_SEPARATOR)
    if not state:
        return None
    return NormalizedState(button_name=button, state=state)


def _basic_decode(switch: Switch, topic: str, payload: str) -> Optional[NormalizedState]:
    parsed = _parse_compound_token(payload)
    if parsed is None:
        logger.debug(f"Ignoring malformed action '{payload}' on {topic}")
        return None
    # another button of the same device
    if parsed.button_name != switch.button_name:
        return None
    return parsed


def _basic_encode(switch: Switch, target_state: str) -> str:
    return target_state


def _shelly_decode(switch: Switch, topic: str, payload: str) -> Optional[NormalizedState]:
    try:
        status = json.loads(payload)
    except (ValueError, TypeError):
        logger.debug(f"Ignoring non-JSON status on {topic}")
        return None
    if not isinstance(status, dict):
        return None

    output = status.get(SHELLY_OUTPUT_FIELD)
    if not isinstance(output, bool):
        return None
    state = SHELLY_PAYLOAD_ON if output else SHELLY_PAYLOAD_OFF
    return NormalizedState(button_name=switch.button_name, state=state)


def _shelly_encode(switch: Switch, target_state: str) -> Optional[str]:
    # Shelly only understands lower case "on" / "off"
    state = target_state.lower()
    if state not in (SHELLY_PAYLOAD_ON, SHELLY_PAYLOAD_OFF):
        return None
    return state


BASIC_SWITCH = VendorAdapter(
    subscription_topic=basic_action_topic,
    decode=_basic_decode,
    command_topic=basic_set_topic,
    encode=_basic_encode,
)

SHELLY_RELAY = VendorAdapter(
    subscription_topic=shelly_status_topic,
    decode=_shelly_decode,
    command_topic=shelly_command_topic,
    encode=_shelly_encode,
)

ADAPTERS: Dict[VendorKind, VendorAdapter] = {
    VendorKind.BASIC_SWITCH: BASIC_SWITCH,
    VendorKind.SHELLY_RELAY: SHELLY_RELAY,
}


def adapter_for(switch: Switch) -> VendorAdapter:
    """Get the adapter of a switch."""
    return ADAPTERS[switch.vendor_kind]
