from enum import Enum

from pydantic_settings import BaseSettings


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    db_url: str = "sqlite+aiosqlite:///pantrypal.db"
    # Everything written is rolled back on shutdown.
    db_force_rollback: bool = False
    mealdb_base_url: str = "https://www.themealdb.com/api/json/v1/1/"
    mealdb_timeout: float = 20
    core_model: str = "gpt-4o-mini"
    openai_api_key: str | None = None
    llm_timeout: float = 60 * 2
    log_level: str = "INFO"
