"""Data models and dataclasses."""

import enum
from dataclasses import dataclass
from typing import Tuple

from constants import UNNAMED_BUTTON


class VendorKind(enum.Enum):
    """Wire protocol family of a switch."""
    BASIC_SWITCH = "basic_switch"
    SHELLY_RELAY = "shelly_relay"


@dataclass(frozen=True)
class Switch:
    """One button of a physical device, registered in a switch group."""
    vendor_kind: VendorKind
    topic_prefix: str
    device_id: str  # MAC / zigbee address
    button_name: str
    group_id: str  # owning group, lookup only

    @property
    def key(self) -> Tuple[str, str]:
        """Identity key inside a group."""
        return self.device_id, self.button_name

    @property
    def is_unnamed_button(self) -> bool:
        return self.button_name == UNNAMED_BUTTON

    def __str__(self) -> str:
        return f"(Id:{self.device_id}, Btn:{self.button_name})"


@dataclass(frozen=True)
class NormalizedState:
    """Decoded state report of one button."""
    button_name: str
    state: str


@dataclass(frozen=True)
class MqttCommand:
    """Command to publish to MQTT."""
    topic: str
    payload: str
