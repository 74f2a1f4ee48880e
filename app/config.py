from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional

class Settings(BaseSettings):
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000

    # Bearer token required for admin uploads and deletes
    api_key: Optional[str] = Field(None, description="Admin API key")

    log_level: str = "INFO"

    # "mongo" or "memory" (seeded sample data, for local development)
    storage_backend: str = Field("mongo", description="Portfolio storage backend")
    mongodb_url: str = "mongodb://localhost:27017/portfolio"

    cloudinary_cloud_name: str = "demo"
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_folder: Optional[str] = "portfolio"

    # Path segment that precedes the object key in storage download URLs
    storage_url_marker: str = "/o/"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @field_validator('storage_backend', mode='before')
    @classmethod
    def parse_storage_backend(cls, v):
        """Normalise the backend name and reject unknown ones"""
        backend = str(v).strip().lower()
        if backend not in ("mongo", "memory"):
            raise ValueError(f"Unsupported storage backend: {v}")
        return backend

    @field_validator('cloudinary_folder', mode='before')
    @classmethod
    def parse_cloudinary_folder(cls, v):
        if isinstance(v, str):
            return v.strip().strip("/") or None
        return v

@lru_cache()
def get_settings() -> Settings:
    return Settings()
