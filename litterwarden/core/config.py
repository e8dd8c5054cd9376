from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_PROJECT_NAME = "LitterWarden API"
DEFAULT_API_V1_PREFIX = "/api/v1"
DEFAULT_DB_URL = 'sqlite:///./litterwarden.db'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    PROJECT_NAME: str = DEFAULT_PROJECT_NAME
    API_V1_PREFIX: str = DEFAULT_API_V1_PREFIX
    ENV: str = 'development'
    DEBUG: bool = False

    DB_URL: str = DEFAULT_DB_URL
    LOG_LEVEL: str = 'INFO'
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ['*']
    AUTO_CREATE_TABLES: bool = False

    GOOGLE_MAPS_API_KEY: str | None = None
    GEOCODING_URL: str = 'https://maps.googleapis.com/maps/api/geocode/json'
    AZURE_CV_KEY: str | None = None
    AZURE_CV_ENDPOINT: str | None = None
    ENRICHMENT_TIMEOUT_SECONDS: float = 10.0

    EVIDENCE_DIR: Path = Path('media/evidence')
    PUBLIC_BASE_URL: str = 'http://localhost:8000'
    MEDIA_URL_PATH: str = '/media/evidence'
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    QUERY_DEFAULT_LIMIT: int = 50
    QUERY_MAX_LIMIT: int = 1000
    LEADERBOARD_LIMIT: int = 100

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, value):  # type: ignore[override]
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return []
            if value == '*':
                return ['*']
            return [item.strip() for item in value.split(',') if item.strip()]
        return value

    @field_validator('MEDIA_URL_PATH')
    @classmethod
    def normalize_media_path(cls, value: str) -> str:
        value = '/' + value.strip().strip('/')
        return value

    @property
    def evidence_url_prefix(self) -> str:
        return f"{self.PUBLIC_BASE_URL.rstrip('/')}{self.MEDIA_URL_PATH}/"


settings = Settings()
