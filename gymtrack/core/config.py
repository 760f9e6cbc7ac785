# gymtrack/core/config.py

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "GymTrack"

    # Device store (notification tray, channel, permission, registration token)
    DATABASE_URL: str = "sqlite+aiosqlite:///./gymtrack_device.db"

    # APScheduler job store, sync driver. Keeps the daily reminder across restarts
    SCHEDULER_JOBSTORE_URL: str = "sqlite:///./gymtrack_jobs.db"

    # Firebase service account JSON. Empty means application default credentials
    FIREBASE_CREDENTIALS_PATH: str = ""

    # Platform API level of the device this process runs for
    PLATFORM_SDK_VERSION: int = 34

    # Deep link target opened when the reminder notification is tapped
    MAIN_ENTRY_POINT: str = "gymtrack://main"

    # Record trigger document ids and skip repeated invocations (off = at-least-once)
    DEDUPLICATE_TRIGGER_EVENTS: bool = False

    LOG_DIR: str = "logs"

    CORS_ORIGINS: list[str] = ["http://localhost:8000"]

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
