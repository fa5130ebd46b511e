from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./taskdb.sqlite"
    app_env: str = "dev"
    log_level: str = "INFO"
    # IANA zone used as "now" when resolving phrases like "tomorrow evening"
    timezone: str = "UTC"
    cors_origins: str = "*"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", case_sensitive=False)

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


settings = Settings()
