"""
Configuration settings for the Footfall Monitoring API
"""

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    db_host: str = "postgres"
    db_port: str = "5432"
    db_name: str = "footfall"
    db_user: str = "footfall_user"
    db_password: str = "footfall_password"
    database_url: str = ""

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    debug: bool = False
    frontend_url: str = "http://localhost:3000"

    # Liveness
    liveness_window_seconds: int = 3600  # 1 hour

    # Store connection
    store_retry_interval: int = 10  # seconds

    # Real-time channel
    broadcast_queue_size: int = 100

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Build database_url from components unless given explicitly
        if not self.database_url:
            self.database_url = f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

# Global settings instance
settings = Settings()
