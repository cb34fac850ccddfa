from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings


REDIRECT_STATUS_CODES = (301, 302, 303, 307, 308)


class Settings(BaseSettings):
    """Конфигурация цепочки middleware с валидацией переменных окружения."""

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application settings
    APP_NAME: str = Field(default="webchain", description="Название приложения")
    DEBUG: bool = Field(default=False, description="Режим отладки")
    LOG_LEVEL: str = Field(default="INFO", description="Уровень логирования")

    # HTTPS settings
    HTTPS_ENABLED: bool = Field(default=True, description="Перенаправлять HTTP на HTTPS")
    HTTPS_REDIRECT_STATUS: int = Field(default=301, description="Код ответа для редиректа на HTTPS")
    HSTS_MAX_AGE: int = Field(
        default=31536000,
        ge=0,
        description="max-age для Strict-Transport-Security в секундах (0 отключает заголовок)"
    )
    HSTS_INCLUDE_SUBDOMAINS: bool = Field(default=False, description="Добавлять includeSubDomains")

    # Minify settings
    MINIFY_ENABLED: bool = Field(default=True, description="Включить минификацию ответов")
    MINIFY_FOR_CACHE_ONLY: bool = Field(
        default=False,
        description="Минифицировать только кэшируемые ответы"
    )
    MINIFY_INLINE_CSS: bool = Field(default=True, description="Минифицировать inline <style> в HTML")
    MINIFY_INLINE_JS: bool = Field(default=True, description="Минифицировать inline <script> в HTML")

    @field_validator("HTTPS_REDIRECT_STATUS")
    @classmethod
    def validate_redirect_status(cls, v: int) -> int:
        """Валидация кода редиректа."""
        if v not in REDIRECT_STATUS_CODES:
            raise ValueError(
                f"HTTPS_REDIRECT_STATUS должен быть одним из: {', '.join(map(str, REDIRECT_STATUS_CODES))}"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Валидация уровня логирования."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL должен быть одним из: {', '.join(valid_levels)}")
        return v.upper()


settings = Settings()
