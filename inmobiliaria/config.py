from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|test|prod
    INMO_DB_URL: str = "sqlite+aiosqlite:///./inmobiliaria.db"
    LOG_LEVEL: str = "INFO"

    # --- Admin auth (bearer tokens issued by the identity provider) ---
    # Send: Authorization: Bearer <token>
    # Comma-separated; empty means open access in dev/test only.
    ADMIN_TOKENS: str = ""

    # --- Bulk import ---
    IMPORT_MAX_ROWS: int = 5000
    IMPORT_MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB
    # Also treat rows accepted earlier in the same upload as existing catalog.
    IMPORT_CHECK_BATCH_DUPLICATES: bool = True

    # --- Admin dashboards ---
    STATS_CACHE_TTL_S: float = 60.0

    def admin_tokens(self) -> set[str]:
        return {t.strip() for t in self.ADMIN_TOKENS.split(",") if t.strip()}


settings = Settings()
