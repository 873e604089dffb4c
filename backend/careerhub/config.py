from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/careerhub.db"
    secret_key: str = "dev-secret-key-change-in-production"
    session_token_days: int = 30

    # Built-in administrator (demo credential, override via environment)
    admin_id: str = "1"
    admin_email: str = "admin@example.com"
    admin_password: str = "admin123"
    admin_name: str = "Admin User"
    admin_avatar: str = "https://i.pravatar.cc/150?img=68"

    # Object storage
    storage_dir: str = "./data/storage"
    storage_base_url: str = "http://localhost:8000/files"

    # Durable session file used by the admin console
    session_file: str = "~/.careerhub/session.json"

    default_page_size: int = 10
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
