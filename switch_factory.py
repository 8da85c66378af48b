"""Create switches from their vendor name."""

from typing import Dict

from constants import UNNAMED_BUTTON, VENDOR_AQARA, VENDOR_SHELLY, VENDOR_TUYA
from errors import ConfigurationError
from models import Switch, VendorKind

VENDOR_KINDS: Dict[str, VendorKind] = {
    VENDOR_AQARA: VendorKind.BASIC_SWITCH,
    VENDOR_TUYA: VendorKind.BASIC_SWITCH,
    VENDOR_SHELLY: VendorKind.SHELLY_RELAY,
}


def vendor_kind_for(vendor: str) -> VendorKind:
    """Resolve a vendor name ("Aqara", "Tuya", "Shelly") to its protocol family."""
    try:
        return VENDOR_KINDS[vendor]
    except KeyError:
        known = ", ".join(sorted(VENDOR_KINDS))
        raise ConfigurationError(f"Unknown switch type '{vendor}'. Known types: {known}") from None


def create_switch(
    vendor: str,
    topic_prefix: str,
    device_id: str,
    group_id: str,
    button_name: str = UNNAMED_BUTTON,
) -> Switch:
    """Create a switch bound to the adapter of its vendor."""
    if not topic_prefix or not device_id:
        raise ConfigurationError("Switch needs both a topic prefix and a device id")
    return Switch(
        vendor_kind=vendor_kind_for(vendor),
        topic_prefix=topic_prefix,
        device_id=device_id,
        button_name=button_name or UNNAMED_BUTTON,
        group_id=group_id,
    )
