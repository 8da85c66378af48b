"""Switch group: keeps the buttons of a group in the same on/off state."""

import asyncio
import logging
import time
import uuid
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from adapters import adapter_for
from constants import DEFAULT_STATE_CACHE_SECONDS, UNNAMED_BUTTON
from errors import ConfigurationError
from models import MqttCommand, NormalizedState, Switch
from state_cache import StateCache
from switch_factory import create_switch

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, str], None]


class Publisher(Protocol):
    """The part of the MQTT bridge a group talks to."""

    def subscribe(self, topic: str, handler: MessageHandler) -> None: ...

    def unsubscribe(self, topic: str, handler: MessageHandler) -> None: ...

    def publish(self, topic: str, payload: str) -> None: ...


class SwitchGroup:
    """
    Group of switch-buttons sharing one logical state.

    When a member reports a new state, every other member is commanded to
    that state unless the cache says it is already there. The originator is
    never commanded, so its own echo can't start a publish loop.

    Messages are handed from the MQTT network thread to a per-group queue and
    handled one at a time by a single consumer task, so fan-outs of one group
    never interleave while other groups run independently.
    """

    def __init__(
        self,
        publisher: Optional[Publisher],
        name: Optional[str] = None,
        state_cache_seconds: float = DEFAULT_STATE_CACHE_SECONDS,
        button_scoped: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.group_id = uuid.uuid4().hex
        self.name = name or self.group_id[:8]
        self.publisher = publisher
        self.button_scoped = button_scoped
        self.cache = StateCache(state_cache_seconds, clock=clock)
        self.members: Dict[Tuple[str, str], Switch] = {}

        self.running = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: Optional[asyncio.Queue[Tuple[str, str]]] = None
        self._task: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"SwitchGroup({self.name}, members={len(self.members)}, running={self.running})"

    def add_switch(
        self,
        vendor: str,
        topic_prefix: str,
        device_id: str,
        button_name: str = UNNAMED_BUTTON,
    ) -> Switch:
        """Add a switch-button to the group. Only allowed before the group runs."""
        if self.running:
            raise ConfigurationError(f"Switch group {self.name} is running, membership is fixed")

        switch = create_switch(vendor, topic_prefix, device_id, self.group_id, button_name)
        if switch.key in self.members:
            raise ConfigurationError(f"Switch {switch} is already in group {self.name}")

        self.members[switch.key] = switch
        logger.debug(f"Added switch {switch} to group {self.name}")
        return switch

    def subscriptions(self) -> Dict[str, List[Switch]]:
        """Subscription topics of the group and the members listening on each."""
        topics: Dict[str, List[Switch]] = {}
        for switch in self.members.values():
            topic = adapter_for(switch).subscription_topic(switch)
            topics.setdefault(topic, []).append(switch)
        return topics

    def decode(self, topic: str, payload: str) -> Optional[Tuple[Switch, NormalizedState]]:
        """Find the member a message belongs to and decode its new state."""
        for switch in self.subscriptions().get(topic, []):
            state = adapter_for(switch).decode(switch, topic, payload)
            if state is not None:
                return switch, state
        return None

    def handle_message(self, topic: str, payload: str) -> List[MqttCommand]:
        """Handle one state report and return the commands published for it."""
        decoded = self.decode(topic, payload)
        if decoded is None:
            logger.debug(f"Group {self.name}: dropped '{payload}' on {topic}")
            return []

        origin, reported = decoded
        self.cache.set(origin.device_id, origin.button_name, reported.state)
        logger.info(f"Switch group: {self.name}. To state: {reported.state}. Initiator: {origin}")
        return self.fan_out(origin, reported.state)

    def fan_out(self, origin: Switch, target_state: str) -> List[MqttCommand]:
        """Command every other member whose cached state differs from ``target_state``."""
        sent: List[MqttCommand] = []
        for switch in self.members.values():
            if switch.key == origin.key:
                continue
            if self.button_scoped and switch.button_name != origin.button_name:
                continue
            if self.cache.get(switch.device_id, switch.button_name) == target_state:
                continue

            command = adapter_for(switch).command(switch, target_state)
            if command is None:
                logger.debug(f"Switch {switch} has no state '{target_state}', skipped")
                continue
            try:
                self._publish(command)
            except Exception as e:
                # next state report retries
                logger.warning(f"Failed to command {switch} to {target_state}: {e}", exc_info=True)
                continue

            # optimistic: a later status report corrects it if the command got lost
            self.cache.set(switch.device_id, switch.button_name, target_state)
            logger.info(f"Change switch state. {switch}. To state: {target_state}.")
            sent.append(command)
        return sent

    def _publish(self, command: MqttCommand):
        if self.publisher is None:
            raise RuntimeError("MQTT bridge is not set. Switch group can't send commands.")
        self.publisher.publish(command.topic, command.payload)

    def start(self):
        """Subscribe all member topics and start the consumer task. Needs a running loop."""
        if self.running:
            return
        if self.publisher is None:
            raise RuntimeError(f"MQTT bridge is not set. Can't run switch group {self.name}.")

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._task = self._loop.create_task(self._consume(self._queue), name=f"switch_group_{self.name}")
        self.running = True

        for topic in self.subscriptions():
            self.publisher.subscribe(topic, self._on_message)
            logger.debug(f"Group {self.name} subscribed to {topic}")
        logger.info(f"Switch group {self.name} running with {len(self.members)} switches")

    async def stop(self):
        """Unsubscribe, finish the message being handled and drop the rest."""
        if not self.running:
            return
        self.running = False

        if self.publisher is not None:
            for topic in self.subscriptions():
                self.publisher.unsubscribe(topic, self._on_message)

        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._queue = None
        self.cache.clear()
        logger.info(f"Switch group {self.name} stopped")

    async def wait_idle(self):
        """Wait until every queued message has been handled."""
        if self._queue is not None:
            await self._queue.join()

    def _on_message(self, topic: str, payload: str):
        """Called by the MQTT bridge, usually from its network thread."""
        if not self.running or self._loop is None or self._queue is None:
            return
        # push into asyncio loop safely from MQTT thread
        self._loop.call_soon_threadsafe(self._queue.put_nowait, (topic, payload))

    async def _consume(self, queue: "asyncio.Queue[Tuple[str, str]]"):
        """Handle queued messages of this group one by one."""
        while True:
            topic, payload = await queue.get()
            try:
                self.handle_message(topic, payload)
            except Exception as e:
                logger.error(f"Group {self.name}: error handling message on {topic}: {e}", exc_info=True)
            finally:
                queue.task_done()
