import os

class Settings:
    PROJECT_NAME: str = "VideoAI Resizer"

    # storage paths
    DATA_DIR: str = os.getenv("DATA_DIR", "/data")
    UPLOADS_DIR: str = os.path.join(DATA_DIR, "uploads")
    PROCESSED_DIR: str = os.path.join(DATA_DIR, "processed")
    CLIPS_DIR: str = os.path.join(DATA_DIR, "clips")
    THUMBNAILS_DIR: str = os.path.join(DATA_DIR, "thumbnails")

    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(DATA_DIR, 'videoai.db')}")
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # empty means stdout only
    LOG_DIR: str = os.getenv("LOG_DIR", "")

    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "500"))
    SUPPORTED_FORMATS: tuple = (".mp4", ".mov", ".avi", ".mkv", ".webm")
    TOKEN_TTL_HOURS: int = int(os.getenv("TOKEN_TTL_HOURS", "168"))

settings = Settings()
