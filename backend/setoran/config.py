import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: Optional[str] = Field(None, alias="SETORAN_DATABASE_URL")
    database_pool_size: int = Field(10, alias="SETORAN_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(10, alias="SETORAN_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="SETORAN_DATABASE_ECHO")
    supabase_url: Optional[str] = Field(None, alias="SUPABASE_URL")
    supabase_anon_key: Optional[str] = Field(None, alias="SUPABASE_ANON_KEY")
    cloudinary_cloud_name: str = Field("dkzklcr1a", alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_upload_preset: str = Field("video_upload", alias="CLOUDINARY_UPLOAD_PRESET")
    http_timeout_ms: int = Field(30000, alias="SETORAN_HTTP_TIMEOUT_MS")
    point_policy: Literal["on_review", "on_creation"] = Field("on_review", alias="SETORAN_POINT_POLICY")
    creation_points: int = Field(0, ge=0, alias="SETORAN_CREATION_POINTS")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def http_timeout_seconds(self) -> float:
        return max(self.http_timeout_ms, 1000) / 1000


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[arg-type]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid backend configuration: {exc}") from exc
