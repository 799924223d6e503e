from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    DATA_DIR: str = "data"

    # AI flows are disabled when no key is configured
    GOOGLE_API_KEY: Optional[str] = None
    AI_MODEL: str = "gemini-2.0-flash"
    AI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    AI_TIMEOUT_SECONDS: float = 30.0

    LOG_LEVEL: str = "INFO"
    ADMIN_USERNAMES: List[str] = []

    class Config:
        env_file = ".env"

settings = Settings()
