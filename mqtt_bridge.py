"""MQTT bridge implementation."""

import logging
import ssl
import threading
from typing import Callable, Dict, List

import paho.mqtt.client as mqtt

from config import MqttSettings

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, str], None]


class MqttBridge:
    """
    Thin layer over the paho client: topic subscriptions with callbacks and
    fire-and-forget publishing.

    Handlers run on the paho network thread.
    """

    def __init__(self, settings: MqttSettings):
        self.settings = settings
        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=settings.client_id)
        if settings.username:
            self.client.username_pw_set(settings.username, settings.password)
        if settings.secure:
            # brokers at home mostly use self-signed certificates
            self.client.tls_set(cert_reqs=ssl.CERT_NONE, tls_version=ssl.PROTOCOL_TLSv1_2)
            self.client.tls_insecure_set(True)
        self.client.reconnect_delay_set(min_delay=settings.reconnect_delay, max_delay=settings.reconnect_delay)

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message

        self._handlers: Dict[str, List[MessageHandler]] = {}
        self._lock = threading.Lock()
        self.messages_received = 0
        self.messages_sent = 0

    def connect(self):
        """Connect to MQTT broker."""
        host, port = self.settings.host, self.settings.port
        try:
            self.client.connect(host, port, keepalive=self.settings.keepalive)
            self.client.loop_start()
            logger.info(f"Connected to MQTT broker at {host}:{port}")
        except Exception as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            raise

    def close(self):
        """Close MQTT connection."""
        try:
            self.client.loop_stop()
        finally:
            self.client.disconnect()
        logger.info(f"MQTT bridge closed. Received {self.messages_received}, sent {self.messages_sent} messages")

    def subscribe(self, topic: str, handler: MessageHandler):
        """Call ``handler(topic, payload)`` for every message on ``topic``."""
        with self._lock:
            handlers = self._handlers.setdefault(topic, [])
            first = not handlers
            handlers.append(handler)
        if first:
            self.client.subscribe(topic, qos=self.settings.qos)
            logger.debug(f"Subscribed to: {topic}")

    def unsubscribe(self, topic: str, handler: MessageHandler):
        """Remove a handler; the broker subscription goes with the last one."""
        with self._lock:
            handlers = self._handlers.get(topic)
            if not handlers or handler not in handlers:
                return
            handlers.remove(handler)
            last = not handlers
            if last:
                del self._handlers[topic]
        if last:
            self.client.unsubscribe(topic)
            logger.debug(f"Unsubscribed from: {topic}")

    def publish(self, topic: str, payload: str):
        """Queue a message for sending, don't wait for delivery."""
        info = self.client.publish(topic, payload=payload, qos=self.settings.qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning(f"Publish to {topic} failed: {mqtt.error_string(info.rc)}")
            return
        self.messages_sent += 1
        logger.debug(f"Published to {topic}: {payload}")

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Handle MQTT connection."""
        if reason_code == 0:
            logger.info("Connected to MQTT broker successfully")
        else:
            logger.warning(f"Connection to MQTT broker refused: {reason_code}")
            return
        # subscriptions are lost with a clean session, restore them
        with self._lock:
            topics = list(self._handlers)
        for topic in topics:
            client.subscribe(topic, qos=self.settings.qos)
        logger.info(f"Subscribed to {len(topics)} topics")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        if reason_code != 0:
            logger.warning(f"Disconnected from MQTT broker ({reason_code}), reconnecting")

    def _on_message(self, client, userdata, msg):
        """Dispatch incoming MQTT message to its handlers."""
        topic = msg.topic
        payload = (msg.payload or b"").decode("utf-8", errors="replace")
        self.messages_received += 1
        logger.debug(f"Received message for topic: {topic}. Payload: {payload}")

        with self._lock:
            handlers = list(self._handlers.get(topic, ()))
        for handler in handlers:
            try:
                handler(topic, payload)
            except Exception as e:
                logger.error(f"Error handling MQTT message on {topic}: {e}", exc_info=True)
