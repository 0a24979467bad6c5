from functools import lru_cache
from typing import Literal, Optional
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

from posai.domain.models.engine import EngineConfig

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "PosAIEngine"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo (optional: in-memory sample catalog when empty)
    MONGO_URI: str = ""
    MONGO_DB: str = "pos"

    # Redis (optional: holds the persisted auth token)
    REDIS_URL: str = ""
    auth_token_key: str = "auth_token"

    # Upstream AI backend
    AI_API_BASE_URL: str = "http://localhost:3000/api/v1"
    AI_MOCK_MODE: bool = True              # local-computation-only when True
    AI_REQUEST_TIMEOUT_S: float = 10.0     # seconds; expiry triggers the fallback

    # Engine
    ai_model_version: str = "4.0.0"
    ai_base_confidence: float = 0.94
    ai_cache_ttl_minutes: float = 5
    ai_enable_cache: bool = True
    ai_random_seed: Optional[int] = None   # fixed seed -> reproducible simulations
    ai_training_frequency_days: int = 7

    # API
    api_prefix: str = "/ai"

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    def engine_config(self) -> EngineConfig:
        """Options object consumed by the engine core."""
        return EngineConfig(
            version=self.ai_model_version,
            confidence=self.ai_base_confidence,
            cache_ttl=self.ai_cache_ttl_minutes,
            enable_cache=self.ai_enable_cache,
            random_seed=self.ai_random_seed,
            training_frequency_days=self.ai_training_frequency_days,
        )

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
