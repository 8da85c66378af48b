"""Configuration loading."""

import os
import socket
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import yaml

from constants import (
    CONFIG_FILE_ENV,
    DEFAULT_CONFIG_FILE,
    DEFAULT_STATE_CACHE_SECONDS,
    MQTT_DEFAULT_PORT,
    MQTT_KEEPALIVE,
    MQTT_QOS,
    MQTT_RECONNECT_DELAY,
    UNNAMED_BUTTON,
)


def _default_client_id() -> str:
    return f"switchsync-{socket.gethostname()}-{uuid.uuid4().hex[:8]}"


@dataclass
class MqttSettings:
    """Connection settings of the MQTT broker."""
    host: str
    port: int = MQTT_DEFAULT_PORT
    username: Optional[str] = None
    password: Optional[str] = None
    secure: bool = False
    client_id: str = field(default_factory=_default_client_id)
    qos: int = MQTT_QOS
    keepalive: int = MQTT_KEEPALIVE
    reconnect_delay: int = MQTT_RECONNECT_DELAY


@dataclass
class SwitchConfig:
    """One switch-button entry of a group."""
    type: str
    prefix: str
    id: str
    button: str = UNNAMED_BUTTON


@dataclass
class GroupConfig:
    name: Optional[str] = None
    button_scoped: bool = True
    switches: List[SwitchConfig] = field(default_factory=list)


@dataclass
class AppConfig:
    mqtt: MqttSettings
    state_cache_seconds: float = DEFAULT_STATE_CACHE_SECONDS
    groups: List[GroupConfig] = field(default_factory=list)


def config_path(environ: Mapping[str, str] = os.environ) -> str:
    """Config file location, ``SWITCHSYNC_CONFIG`` overrides the default."""
    return environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE


def _read_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Configuration file '{path}' not found. "
            f"Please copy '{DEFAULT_CONFIG_FILE}.example' to '{path}' "
            f"and update with your settings."
        )

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in '{path}': {e}")

    if not config:
        raise ValueError(f"'{path}' is empty")
    if not isinstance(config, dict):
        raise ValueError(f"'{path}' must contain a mapping at top level")
    return config


def _parse_mqtt(raw: Dict[str, Any], environ: Mapping[str, str]) -> MqttSettings:
    mqtt_config = dict(raw or {})

    # environment wins over the file
    for key, env_name in (("host", "MQTT_HOST"), ("port", "MQTT_PORT"),
                          ("username", "MQTT_USERNAME"), ("password", "MQTT_PASSWORD")):
        if environ.get(env_name):
            mqtt_config[key] = environ[env_name]

    if 'host' not in mqtt_config:
        raise ValueError("Missing 'mqtt.host' in configuration")
    if 'port' not in mqtt_config:
        raise ValueError("Missing 'mqtt.port' in configuration")

    try:
        port = int(mqtt_config['port'])
        qos = int(mqtt_config.get('qos', MQTT_QOS))
    except (TypeError, ValueError):
        raise ValueError("'mqtt.port' and 'mqtt.qos' must be integers")
    if qos not in (0, 1, 2):
        raise ValueError(f"'mqtt.qos' must be 0, 1 or 2, got {qos}")

    settings = MqttSettings(
        host=str(mqtt_config['host']),
        port=port,
        username=mqtt_config.get('username'),
        password=mqtt_config.get('password'),
        secure=bool(mqtt_config.get('secure', False)),
        qos=qos,
    )
    if mqtt_config.get('client_id'):
        settings.client_id = str(mqtt_config['client_id'])
    return settings


def _parse_switch(raw: Any, where: str) -> SwitchConfig:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} must be a mapping")
    for key in ('type', 'prefix', 'id'):
        if key not in raw:
            raise ValueError(f"Missing '{key}' in {where}")
        # YAML reads unquoted 0x... ids as numbers and would print them in decimal
        if not isinstance(raw[key], str):
            raise ValueError(f"'{key}' in {where} must be a string, quote it: {key}: \"{raw[key]}\"")

    button = raw.get('button')
    if button is None:
        button = UNNAMED_BUTTON
    elif isinstance(button, bool) or not isinstance(button, (str, int)):
        raise ValueError(f"'button' in {where} must be a string, quote it: button: \"{button}\"")
    return SwitchConfig(
        type=raw['type'],
        prefix=raw['prefix'],
        id=raw['id'],
        button=str(button),
    )


def _parse_groups(raw: Any) -> List[GroupConfig]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("'groups' must be a list")

    groups: List[GroupConfig] = []
    for i, group in enumerate(raw):
        if not isinstance(group, dict):
            raise ValueError(f"groups[{i}] must be a mapping")
        switches = group.get('switches') or []
        if not isinstance(switches, list):
            raise ValueError(f"groups[{i}].switches must be a list")
        groups.append(GroupConfig(
            name=group.get('name'),
            button_scoped=bool(group.get('button_scoped', True)),
            switches=[_parse_switch(s, f"groups[{i}].switches[{j}]") for j, s in enumerate(switches)],
        ))
    return groups


def load_config(path: Optional[str] = None, environ: Mapping[str, str] = os.environ) -> AppConfig:
    """Load and validate configuration file."""
    config = _read_yaml(path or config_path(environ))

    if 'mqtt' not in config:
        raise ValueError("Missing 'mqtt' section in configuration")

    groups_config = config.get('switch_groups') or {}
    try:
        cache_seconds = float(groups_config.get('state_cache_seconds', DEFAULT_STATE_CACHE_SECONDS))
    except (TypeError, ValueError):
        raise ValueError("'switch_groups.state_cache_seconds' must be a number")
    if cache_seconds <= 0:
        raise ValueError("'switch_groups.state_cache_seconds' must be positive")

    return AppConfig(
        mqtt=_parse_mqtt(config['mqtt'], environ),
        state_cache_seconds=cache_seconds,
        groups=_parse_groups(config.get('groups')),
    )
