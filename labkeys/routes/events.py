from fastapi import APIRouter
from labkeys.config import settings
from labkeys.services.events import event_publisher

router = APIRouter(prefix="/api/events", tags=["Events"])

@router.get("/status")
def get_event_feed_status():
    """Get MQTT event feed connection status."""
    return {
        "enabled": settings.mqtt_enabled,
        "connected": event_publisher.is_connected,
        "running": event_publisher.is_running(),
        "topicPrefix": settings.mqtt_topic_prefix,
    }
