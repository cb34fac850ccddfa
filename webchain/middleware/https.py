"""
Middleware для HTTPS redirects и заголовка Strict-Transport-Security.

Использование:
    from webchain.middleware.https import HttpsConfigBuilder, HttpsMiddleware

    config = HttpsConfigBuilder().max_age(3600).include_subdomains().build()
    middleware = HttpsMiddleware(config)
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from starlette.datastructures import URL

from webchain.core.config import REDIRECT_STATUS_CODES, Settings
from webchain.http.messages import Request, Response
from webchain.middleware.chain import Handler
from webchain.utils.errors import ConfigurationError, InvalidRedirectStatusError
from webchain.utils.logger import logger

HSTS_HEADER = "Strict-Transport-Security"
# Один год по умолчанию
DEFAULT_HSTS_MAX_AGE = 31536000


@dataclass(frozen=True)
class RedirectConfig:
    """Код ответа для редиректа."""
    status_code: int = 301

    def __post_init__(self):
        if self.status_code not in REDIRECT_STATUS_CODES:
            raise InvalidRedirectStatusError(self.status_code, REDIRECT_STATUS_CODES)


@dataclass(frozen=True)
class HstsConfig:
    """Параметры HSTS. max_age = 0 или None отключает заголовок."""
    max_age: Optional[int] = DEFAULT_HSTS_MAX_AGE
    include_subdomains: bool = False

    def __post_init__(self):
        if self.max_age is not None and self.max_age < 0:
            raise ConfigurationError(f"HSTS max-age must be non-negative, got {self.max_age}")


@dataclass(frozen=True)
class HttpsConfig:
    redirect: RedirectConfig = field(default_factory=RedirectConfig)
    hsts: HstsConfig = field(default_factory=HstsConfig)


class RedirectPolicy:
    """Строит ответ-редирект. Ответ всегда новый, без старых заголовков."""

    def __init__(self, config: Optional[RedirectConfig] = None):
        self.config = config or RedirectConfig()

    @classmethod
    def for_status(cls, status_code: int) -> "RedirectPolicy":
        return cls(RedirectConfig(status_code))

    @property
    def status_code(self) -> int:
        return self.config.status_code

    def build(self, target_uri: Union[str, URL]) -> Response:
        return Response.build(
            status_code=self.config.status_code,
            headers={"Location": str(target_uri)},
        )


class HstsPolicy:
    """Вычисляет значение заголовка Strict-Transport-Security."""

    def __init__(self, config: Optional[HstsConfig] = None):
        self.config = config or HstsConfig()

    @property
    def enabled(self) -> bool:
        return bool(self.config.max_age)

    def header_value(self) -> Optional[str]:
        if not self.enabled:
            return None
        suffix = ";includeSubDomains" if self.config.include_subdomains else ""
        return f"max-age={self.config.max_age:d}{suffix}"

    def apply(self, response: Response) -> Response:
        value = self.header_value()
        if value is None:
            return response
        return response.with_header(HSTS_HEADER, value)


class HttpsConfigBuilder:
    """
    Построитель конфигурации HTTPS.

    Сеттеры возвращают тот же построитель для цепочки вызовов,
    `build()` возвращает замороженный `HttpsConfig`.
    """

    def __init__(self):
        self._redirect_status = 301
        self._max_age: Optional[int] = DEFAULT_HSTS_MAX_AGE
        self._include_subdomains = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpsConfigBuilder":
        return (
            cls()
            .redirect(settings.HTTPS_REDIRECT_STATUS)
            .max_age(settings.HSTS_MAX_AGE)
            .include_subdomains(settings.HSTS_INCLUDE_SUBDOMAINS)
        )

    def redirect(self, status_code: int) -> "HttpsConfigBuilder":
        # Ошибку отдаём сразу, а не при build()
        RedirectConfig(status_code)
        self._redirect_status = status_code
        return self

    def max_age(self, max_age: Optional[int]) -> "HttpsConfigBuilder":
        self._max_age = max_age
        return self

    def include_subdomains(self, include_subdomains: bool = True) -> "HttpsConfigBuilder":
        self._include_subdomains = include_subdomains
        return self

    def build(self) -> HttpsConfig:
        return HttpsConfig(
            redirect=RedirectConfig(self._redirect_status),
            hsts=HstsConfig(self._max_age, self._include_subdomains),
        )


class HttpsMiddleware:
    """
    Перенаправляет HTTP на HTTPS и добавляет HSTS к HTTPS ответам.

    - Схема не https (без учёта регистра): редирект на тот же URI со схемой
      https, `next` не вызывается, входящий ответ отбрасывается.
    - Схема https: при max_age > 0 добавляется Strict-Transport-Security,
      затем вызывается `next`. Тело ответа не трогается.
    """

    def __init__(self, config: Optional[HttpsConfig] = None):
        self.config = config or HttpsConfig()
        self.redirect_policy = RedirectPolicy(self.config.redirect)
        self.hsts_policy = HstsPolicy(self.config.hsts)

    def invoke(self, request: Request, response: Response, next: Handler) -> Response:
        if request.scheme.lower() != "https":
            https_url = request.url.replace(scheme="https")
            logger.info(f"Redirecting HTTP to HTTPS: {https_url}")
            return self.redirect_policy.build(https_url)

        return next(request, self.hsts_policy.apply(response))

    __call__ = invoke


__all__ = [
    "HSTS_HEADER",
    "RedirectConfig",
    "HstsConfig",
    "HttpsConfig",
    "RedirectPolicy",
    "HstsPolicy",
    "HttpsConfigBuilder",
    "HttpsMiddleware",
]
