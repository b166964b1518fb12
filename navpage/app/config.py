"""Application configuration loaded from .env and defaults."""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    storage_backend: str = "sqlite"
    storage_path: Path = PROJECT_ROOT / "data" / "local_storage.db"
    web_host: str = "127.0.0.1"
    web_port: int = 3000
    blob_read_write_token: str = ""
    blob_api_url: str = "https://blob.vercel-storage.com"
    upload_max_size: int = 1_000_000
    upload_prefix: str = "icons"
    http_timeout: float = 30.0
    proxy_url: str = "http://127.0.0.1:3000"
    log_path: Path = PROJECT_ROOT / "data" / "logs" / "app.log"
    log_level: str = "INFO"

    @property
    def upload_configured(self) -> bool:
        return bool(self.blob_read_write_token.strip())

    @property
    def upload_endpoint(self) -> str:
        return self.proxy_url.rstrip("/") + "/api/upload"

    def get_storage_path(self) -> Optional[Path]:
        """Return the storage file for file-backed backends, None for memory."""
        if self.storage_backend == "memory":
            return None
        return self.storage_path

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"

def get_settings() -> Settings:
    return Settings()
