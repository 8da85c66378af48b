"""Main SwitchSync application."""

import asyncio
import logging
from typing import List, Optional

from config import AppConfig, GroupConfig
from errors import ConfigurationError
from group_registry import GroupRegistry
from mqtt_bridge import MqttBridge

logger = logging.getLogger(__name__)


class SwitchSync:
    """Keeps the configured switch groups in sync over MQTT."""

    def __init__(self, config: AppConfig, bridge: Optional[MqttBridge] = None):
        self.config = config
        self.mqtt = bridge or MqttBridge(config.mqtt)
        self.registry = GroupRegistry(self.mqtt, state_cache_seconds=config.state_cache_seconds)
        self.running = False
        self._stopped: Optional[asyncio.Event] = None

    def register_group(self, group_config: GroupConfig) -> str:
        """Register one configured group; switches with bad settings are skipped."""
        group_id = self.registry.register_group(
            name=group_config.name,
            button_scoped=group_config.button_scoped,
        )
        group = self.registry.get(group_id)
        for sw in group_config.switches:
            try:
                self.registry.add_switch(group_id, sw.type, sw.prefix, sw.id, sw.button)
            except ConfigurationError as e:
                logger.error(f"Configuration error in group {group.name}: {e}. Switch {sw.id} skipped.")
        return group_id

    def register_groups(self) -> List[str]:
        group_ids = [self.register_group(g) for g in self.config.groups]
        if not group_ids:
            logger.warning("No switch groups configured")
        return group_ids

    async def start(self):
        """Start the bridge and run until stopped."""
        self._stopped = asyncio.Event()
        self.running = True

        self.mqtt.connect()
        logger.info("MQTT bridge connected")

        for group_id in self.register_groups():
            self.registry.run_group(group_id)
        logger.info(f"{len(self.registry.running_groups())} switch groups running")

        # Wait until stopped
        await self._stopped.wait()

    async def stop(self):
        """Stop the bridge."""
        if not self.running:
            return
        self.running = False

        await self.registry.stop_all()
        try:
            self.mqtt.close()
        except Exception as e:
            logger.warning(f"Error closing MQTT connection: {e}")
        if self._stopped is not None:
            self._stopped.set()
