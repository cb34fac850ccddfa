"""
Адаптеры минификации HTML/CSS/JS.

Middleware зависит только от протокола `MinifierAdapter`, конкретная
реализация внедряется при создании. `MinifyHtmlAdapter` использует
библиотеку minify-html.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import minify_html

from webchain.utils.logger import logger

InlineMinifier = Callable[[bytes], bytes]


@dataclass(frozen=True)
class HtmlOptions:
    """
    Параметры минификации HTML.

    css_minifier / js_minifier - хуки для inline <style> и <script>,
    None означает, что inline блоки не трогаются.
    """
    css_minifier: Optional[InlineMinifier] = None
    js_minifier: Optional[InlineMinifier] = None
    js_clean_comments: bool = True


class MinifierAdapter(Protocol):
    def minify_html(self, body: bytes, options: HtmlOptions) -> bytes:
        ...

    def minify_css(self, body: bytes) -> bytes:
        ...

    def minify_js(self, body: bytes) -> bytes:
        ...


class MinifyHtmlAdapter:
    """
    Адаптер на основе minify-html.

    CSS и JS минифицируются через обёртку в <style>/<script>, так как
    библиотека работает с HTML документами. Исключения библиотеки
    не перехватываются.
    """

    encoding = "utf-8"

    def minify_html(self, body: bytes, options: HtmlOptions) -> bytes:
        minified = minify_html.minify(
            body.decode(self.encoding),
            minify_css=options.css_minifier is not None,
            minify_js=options.js_minifier is not None,
            keep_closing_tags=True,
            keep_html_and_head_opening_tags=True,
        )
        return minified.encode(self.encoding)

    def minify_css(self, body: bytes) -> bytes:
        return self._minify_wrapped(body, "style", minify_css=True)

    def minify_js(self, body: bytes) -> bytes:
        return self._minify_wrapped(body, "script", minify_js=True)

    def _minify_wrapped(self, body: bytes, tag: str, **flags) -> bytes:
        source = body.decode(self.encoding)
        prefix = f"<{tag}>"
        suffix = f"</{tag}>"

        minified = minify_html.minify(
            f"{prefix}{source}{suffix}",
            keep_closing_tags=True,
            keep_html_and_head_opening_tags=True,
            **flags,
        )

        if minified.startswith(prefix) and minified.endswith(suffix):
            return minified[len(prefix):-len(suffix)].encode(self.encoding)

        logger.warning(f"minify-html returned unexpected <{tag}> wrapper; leaving output as-is")
        return body


__all__ = ["HtmlOptions", "InlineMinifier", "MinifierAdapter", "MinifyHtmlAdapter"]
