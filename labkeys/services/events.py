import json
import logging
import threading
import ssl
from pathlib import Path
from typing import Optional
import paho.mqtt.client as mqtt
from labkeys.config import settings
from labkeys.utils.timezone import now_utc

logger = logging.getLogger(__name__)

EVENT_BORROWED = "borrowed"
EVENT_RETURNED = "returned"
EVENT_DELETED = "deleted"


class EventPublisher:
    """Publishes committed checkout events to MQTT for dashboards and displays.

    Publishing is fire-and-forget: by the time an event is published the
    store has already committed, so a broker failure is logged and dropped.
    """

    def __init__(self):
        self.client: Optional[mqtt.Client] = None
        self.is_connected = False
        self._lock = threading.Lock()

    def on_connect(self, client, userdata, flags, reason_code, properties):
        """Callback when MQTT client connects to broker."""
        if not reason_code.is_failure:
            self.is_connected = True
            logger.info(f"MQTT client connected to {settings.mqtt_broker}:{settings.mqtt_port}")
        else:
            logger.error(f"MQTT connection failed: {reason_code}")
            self.is_connected = False

    def on_disconnect(self, client, userdata, flags, reason_code, properties):
        """Callback when MQTT client disconnects from broker."""
        self.is_connected = False
        if reason_code.is_failure:
            logger.warning(f"MQTT client disconnected unexpectedly ({reason_code})")
        else:
            logger.info("MQTT client disconnected")

    def topic_for(self, event: str) -> str:
        return f"{settings.mqtt_topic_prefix}/{event}"

    def build_payload(self, event: str, key_id: str, teacher_id: str, transaction_id: int) -> str:
        return json.dumps({
            "event": event,
            "keyId": key_id,
            "teacherId": teacher_id,
            "transactionId": transaction_id,
            "at": now_utc().isoformat(),
        })

    def publish(self, event: str, key_id: str, teacher_id: str, transaction_id: int) -> bool:
        """Publish one event. Returns False if it was not handed to the broker."""
        if not self.is_running():
            logger.debug(f"Event feed not connected, dropping {event} event for key {key_id}")
            return False

        topic = self.topic_for(event)
        payload = self.build_payload(event, key_id, teacher_id, transaction_id)
        try:
            result = self.client.publish(topic, payload, qos=1)
        except (OSError, ValueError) as e:
            logger.error(f"Error publishing {event} event to {topic}: {e}")
            return False
        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.error(f"Failed to publish {event} event to {topic}: rc={result.rc}")
            return False
        logger.info(f"Published {event} event for key {key_id} to {topic}")
        return True

    def _setup_tls(self):
        """Configure TLS/SSL for MQTT client."""
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        if settings.mqtt_ca_cert:
            ca_cert_path = Path(settings.mqtt_ca_cert)
            if not ca_cert_path.exists():
                logger.error(f"CA certificate file not found: {ca_cert_path}")
                raise FileNotFoundError(f"CA certificate file not found: {ca_cert_path}")
            context.load_verify_locations(cafile=str(ca_cert_path))
            logger.info(f"Loaded CA certificate from {ca_cert_path}")
        else:
            context.load_default_certs()
            logger.info("Using system default CA certificates")
        self.client.tls_set_context(context)
        logger.info("TLS/SSL configured for MQTT connection")

    def connect(self):
        """Connect to the MQTT broker if the event feed is enabled."""
        if not settings.mqtt_enabled:
            logger.info("MQTT event feed disabled")
            return

        with self._lock:
            if self.client and self.is_connected:
                logger.info("MQTT client already connected")
                return

            client_id = f"labkeys-{threading.current_thread().ident}"
            self.client = mqtt.Client(
                mqtt.CallbackAPIVersion.VERSION2,
                client_id=client_id,
                clean_session=True,
            )
            self.client.on_connect = self.on_connect
            self.client.on_disconnect = self.on_disconnect

            if settings.mqtt_use_tls:
                self._setup_tls()
            if settings.mqtt_username and settings.mqtt_password:
                self.client.username_pw_set(settings.mqtt_username, settings.mqtt_password)

            protocol = "TLS" if settings.mqtt_use_tls else "TCP"
            logger.info(f"Connecting to MQTT broker at {settings.mqtt_broker}:{settings.mqtt_port} over {protocol}")
            try:
                self.client.connect(settings.mqtt_broker, settings.mqtt_port, keepalive=60)
            except OSError as conn_error:
                logger.warning(f"Initial MQTT connection failed: {conn_error}. The client will retry in the background.")
            # Network loop thread handles reconnection
            self.client.loop_start()

    def disconnect(self):
        """Disconnect from MQTT broker."""
        with self._lock:
            if self.client:
                self.client.loop_stop()
                self.client.disconnect()
                self.is_connected = False
                logger.info("MQTT client disconnected")

    def is_running(self) -> bool:
        """Check if the publisher is connected."""
        return self.is_connected and self.client is not None


event_publisher = EventPublisher()
