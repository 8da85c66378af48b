"""Unit tests for the switch factory."""

import pytest

from constants import UNNAMED_BUTTON
from errors import ConfigurationError
from models import VendorKind
from switch_factory import create_switch, vendor_kind_for


class TestSwitchFactory:

    @pytest.mark.parametrize("vendor,kind", [
        ("Aqara", VendorKind.BASIC_SWITCH),
        ("Tuya", VendorKind.BASIC_SWITCH),
        ("Shelly", VendorKind.SHELLY_RELAY),
    ])
    def test_known_vendors(self, vendor, kind):
        assert vendor_kind_for(vendor) is kind

    @pytest.mark.parametrize("vendor", ["Foo", "aqara", ""])
    def test_unknown_vendor(self, vendor):
        with pytest.raises(ConfigurationError, match="Unknown switch type"):
            vendor_kind_for(vendor)

    def test_create_switch(self):
        sw = create_switch("Shelly", "shellies", "shelly1", "group-1", "switch:0")
        assert sw.vendor_kind is VendorKind.SHELLY_RELAY
        assert sw.key == ("shelly1", "switch:0")
        assert sw.group_id == "group-1"

    def test_default_button_is_unnamed(self):
        sw = create_switch("Aqara", "zigbee", "0x1234", "group-1")
        assert sw.button_name == UNNAMED_BUTTON
        assert sw.is_unnamed_button

    def test_missing_device_id(self):
        with pytest.raises(ConfigurationError):
            create_switch("Aqara", "zigbee", "", "group-1")
