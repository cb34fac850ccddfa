"""Middleware минификации тела ответа по типу содержимого."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from webchain.core.config import Settings
from webchain.http.messages import BodyFactory, Request, Response, default_body_factory
from webchain.middleware.chain import Handler
from webchain.services.cache import CacheabilityGate, default_gate
from webchain.services.minifier import HtmlOptions, MinifierAdapter
from webchain.utils.logger import logger


class ContentKind(str, Enum):
    """Тип содержимого, определяющий минификатор."""
    HTML = "html"
    CSS = "css"
    JS = "js"
    OTHER = "other"


EXTENSION_KINDS = {
    "css": ContentKind.CSS,
    "js": ContentKind.JS,
    "mjs": ContentKind.JS,
    "html": ContentKind.HTML,
    "htm": ContentKind.HTML,
}

# Порядок важен: "text/css" проверяется раньше "html"
CONTENT_TYPE_MARKERS = (
    ("css", ContentKind.CSS),
    ("javascript", ContentKind.JS),
    ("html", ContentKind.HTML),
)


def path_extension(path: str) -> str:
    """Расширение последнего сегмента пути в нижнем регистре ("" если нет)."""
    segment = path.rsplit("/", 1)[-1]
    if "." not in segment.lstrip("."):
        return ""
    return segment.rsplit(".", 1)[-1].lower()


def detect_content_kind(path: Optional[str], content_type: Optional[str]) -> ContentKind:
    """
    Определяет тип содержимого.

    Расширение пути имеет приоритет над Content-Type. Если ни то, ни другое
    не распознано - ContentKind.OTHER, исключений не бывает.
    """
    kind = EXTENSION_KINDS.get(path_extension(path or ""))
    if kind is not None:
        return kind

    header = (content_type or "").lower()
    for marker, marker_kind in CONTENT_TYPE_MARKERS:
        if marker in header:
            return marker_kind

    return ContentKind.OTHER


@dataclass(frozen=True)
class MinifyConfig:
    """Конфигурация минификации."""
    for_cache_only: bool = False
    inline_css: bool = True
    inline_js: bool = True


class MinifyConfigBuilder:
    """Построитель `MinifyConfig`, сеттеры возвращают тот же построитель."""

    def __init__(self):
        self._for_cache_only = False
        self._inline_css = True
        self._inline_js = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "MinifyConfigBuilder":
        return (
            cls()
            .for_cache(settings.MINIFY_FOR_CACHE_ONLY)
            .inline_css(settings.MINIFY_INLINE_CSS)
            .inline_js(settings.MINIFY_INLINE_JS)
        )

    def for_cache(self, for_cache_only: bool = True) -> "MinifyConfigBuilder":
        self._for_cache_only = for_cache_only
        return self

    def inline_css(self, inline_css: bool = True) -> "MinifyConfigBuilder":
        self._inline_css = inline_css
        return self

    def inline_js(self, inline_js: bool = True) -> "MinifyConfigBuilder":
        self._inline_js = inline_js
        return self

    def build(self) -> MinifyConfig:
        return MinifyConfig(
            for_cache_only=self._for_cache_only,
            inline_css=self._inline_css,
            inline_js=self._inline_js,
        )


class MinifyMiddleware:
    """
    Минифицирует HTML/CSS/JS ответы перед передачей дальше по цепочке.

    При for_cache_only минифицируются только ответы, которые можно положить
    в shared cache. Остальные передаются в `next` без изменений.
    """

    def __init__(
        self,
        adapter: MinifierAdapter,
        config: Optional[MinifyConfig] = None,
        body_factory: BodyFactory = default_body_factory,
        gate: Optional[CacheabilityGate] = None,
    ):
        self.adapter = adapter
        self.config = config or MinifyConfig()
        self.body_factory = body_factory
        self.gate = gate or default_gate

    def invoke(self, request: Request, response: Response, next: Handler) -> Response:
        if self.config.for_cache_only and not self.gate.is_cacheable(request, response):
            logger.debug(f"Skipping minification of non-cacheable response: {request.method} {request.path}")
            return next(request, response)

        kind = detect_content_kind(request.path, response.get_header_line("content-type"))
        if kind is ContentKind.OTHER:
            return next(request, response)

        logger.debug(f"Minifying {kind.value} response: {request.path}")
        return next(request, self._replace_body(response, self.minify(kind, response.read_body())))

    __call__ = invoke

    def minify(self, kind: ContentKind, body: bytes) -> bytes:
        if kind is ContentKind.CSS:
            return self.adapter.minify_css(body)
        if kind is ContentKind.JS:
            return self.adapter.minify_js(body)
        if kind is ContentKind.HTML:
            return self.adapter.minify_html(body, self.html_options())
        return body

    def html_options(self) -> HtmlOptions:
        return HtmlOptions(
            css_minifier=self.adapter.minify_css if self.config.inline_css else None,
            js_minifier=self.adapter.minify_js if self.config.inline_js else None,
        )

    def _replace_body(self, response: Response, minified: bytes) -> Response:
        stream = self.body_factory()
        stream.write(minified)
        # Длина изменилась, хост пересчитает её сам
        return response.with_body(stream).without_header("content-length")


__all__ = [
    "ContentKind",
    "detect_content_kind",
    "path_extension",
    "MinifyConfig",
    "MinifyConfigBuilder",
    "MinifyMiddleware",
]
