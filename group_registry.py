"""Registry of switch groups, the API used to declare groups."""

import logging
from typing import Dict, List, Optional

from constants import DEFAULT_STATE_CACHE_SECONDS, UNNAMED_BUTTON
from errors import ConfigurationError
from models import Switch
from switch_group import Publisher, SwitchGroup

logger = logging.getLogger(__name__)


class GroupRegistry:
    """Owns all switch groups; switches refer to their group by id."""

    def __init__(
        self,
        publisher: Optional[Publisher] = None,
        state_cache_seconds: float = DEFAULT_STATE_CACHE_SECONDS,
    ):
        self.publisher = publisher
        self.state_cache_seconds = state_cache_seconds
        self.groups: Dict[str, SwitchGroup] = {}

    def init(self, publisher: Publisher):
        """Set the MQTT bridge of new groups and of registered groups not yet running."""
        self.publisher = publisher
        for group in self.groups.values():
            if not group.running:
                group.publisher = publisher

    def register_group(self, name: Optional[str] = None, button_scoped: bool = True) -> str:
        """Create a new, empty switch group and return its id."""
        group = SwitchGroup(
            self.publisher,
            name=name,
            state_cache_seconds=self.state_cache_seconds,
            button_scoped=button_scoped,
        )
        self.groups[group.group_id] = group
        logger.debug(f"Registered switch group {group.name} ({group.group_id})")
        return group.group_id

    def get(self, group_id: str) -> SwitchGroup:
        try:
            return self.groups[group_id]
        except KeyError:
            raise ConfigurationError(f"Unknown switch group '{group_id}'") from None

    def add_switch(
        self,
        group_id: str,
        vendor: str,
        topic_prefix: str,
        device_id: str,
        button_name: str = UNNAMED_BUTTON,
    ) -> Switch:
        """Add a switch-button to a group. Raises ConfigurationError on bad input."""
        return self.get(group_id).add_switch(vendor, topic_prefix, device_id, button_name)

    def run_group(self, group_id: str):
        """Start listening to the switches of a group."""
        self.get(group_id).start()

    async def stop_group(self, group_id: str):
        """Stop a group and forget it."""
        group = self.groups.pop(group_id, None)
        if group is None:
            return
        await group.stop()

    async def stop_all(self):
        for group_id in list(self.groups):
            await self.stop_group(group_id)

    def running_groups(self) -> List[SwitchGroup]:
        return [g for g in self.groups.values() if g.running]
