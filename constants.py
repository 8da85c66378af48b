"""Constants for the SwitchSync bridge."""

# Button name of devices with a single, unnamed button (e.g. Aqara H1)
UNNAMED_BUTTON = "*/main/*"

# BasicSwitch compound token "<STATE>_<BUTTON>"
BUTTON_SEPARATOR = "_"

# Vendor discriminators accepted at registration
VENDOR_AQARA = "Aqara"
VENDOR_TUYA = "Tuya"
VENDOR_SHELLY = "Shelly"

# Shelly relay payloads
SHELLY_OUTPUT_FIELD = "output"
SHELLY_PAYLOAD_ON = "on"
SHELLY_PAYLOAD_OFF = "off"

# Default configuration paths
DEFAULT_CONFIG_FILE = "switchsync.yaml"
CONFIG_FILE_ENV = "SWITCHSYNC_CONFIG"

# State cache lifetime (seconds)
DEFAULT_STATE_CACHE_SECONDS = 2.0

# MQTT settings
MQTT_DEFAULT_PORT = 1883
MQTT_QOS = 0
MQTT_KEEPALIVE = 60
MQTT_RECONNECT_DELAY = 5
