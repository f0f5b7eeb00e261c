from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Get the project directory (parent of the labkeys package)
PROJECT_DIR = Path(__file__).parent.parent
ENV_FILE = PROJECT_DIR / ".env"

class Settings(BaseSettings):
    # Server settings
    host: str = "0.0.0.0"
    port: int = 5123
    cors_origins: str = "http://localhost:3000"  # Comma separated

    # Database settings
    database_url: str = "sqlite:///./labkeys.db"
    db_echo: bool = False
    db_read_retries: int = 2  # Extra attempts for idempotent reads only
    sqlite_busy_timeout: float = 15.0  # Seconds a writer waits for the SQLite lock

    # JWT settings - set jwt_secret_key in .env for anything but local use
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 480

    # Checkout policy
    overdue_threshold_hours: int = 24
    timezone: str = "UTC"  # Timezone used when rendering timestamps

    # Bootstrap admin, created on startup if both are set and the id is unused
    bootstrap_admin_id: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None

    # MQTT event feed - disabled unless mqtt_enabled is set
    mqtt_enabled: bool = False
    mqtt_broker: str = "localhost"
    mqtt_port: int = 1883
    mqtt_username: Optional[str] = None
    mqtt_password: Optional[str] = None
    mqtt_topic_prefix: str = "labkeys/events"
    mqtt_use_tls: bool = False
    mqtt_ca_cert: Optional[str] = None  # Path to CA certificate file

    class Config:
        env_file = str(ENV_FILE) if ENV_FILE.exists() else ".env"
        case_sensitive = False

    @property
    def cors_origin_list(self) -> list:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

settings = Settings()
