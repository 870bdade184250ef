from typing import Annotated, Literal, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import yaml
from pathlib import Path
from dotenv import load_dotenv
import json
import os
import logging

load_dotenv()
_question_sets_path = Path(__file__).parent / "question_sets.yaml"
question_sets = yaml.safe_load(_question_sets_path.read_text(encoding="utf-8"))

logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Onboarding API")
    PREFIX: str = os.getenv("PREFIX", "api")
    API_PREFIX: str = f"/{os.getenv('PREFIX', 'api')}"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", "sqlite+aiosqlite:///./onboarding.db")
    DB_ECHO: bool = False
    DB_CREATE_ALL: bool = False

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:5174",
    ]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_list_from_str(cls, v: Union[str, list[str]]) -> list[str]:
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    # Onboarding
    QUESTION_SET_VERSION: str = os.getenv("QUESTION_SET_VERSION", "trading-v1")
    ONBOARDING_WRITE_POLICY: Literal["insert", "upsert"] = "upsert"
    ONBOARDING_REQUIRE_AUTH: bool = False
    ONBOARDING_DEGRADED_MODE: bool = False
    ONBOARDING_RECENT_LIMIT: int = 50

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore")

try:
    settings = Settings()
except Exception as e:
    raise Exception(f'ERROR IN config.py: {e}')
