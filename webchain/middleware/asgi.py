"""
Подключение цепочки middleware к Starlette/FastAPI приложению.

Цепочка синхронная, поэтому выполняется в threadpool Starlette, а
нижележащее приложение вызывается обратно в event loop через anyio.

Использование:
    from webchain.core.config import settings
    from webchain.middleware.asgi import ChainMiddleware, build_chain_middleware_kwargs
    from webchain.services.minifier import MinifyHtmlAdapter

    app.add_middleware(
        ChainMiddleware,
        **build_chain_middleware_kwargs(settings, MinifyHtmlAdapter()),
    )
"""

from typing import Any, Awaitable, Callable, Dict, List, Sequence

import anyio.from_thread
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse

from webchain.core.config import Settings
from webchain.http.messages import Request, Response
from webchain.middleware.chain import Handler, Middleware, Pipeline
from webchain.middleware.https import HttpsConfigBuilder, HttpsMiddleware
from webchain.middleware.minify import MinifyConfigBuilder, MinifyMiddleware
from webchain.services.minifier import MinifierAdapter
from webchain.utils.logger import configure_level, logger

CallNext = Callable[[StarletteRequest], Awaitable[StarletteResponse]]

# Для этих кодов тело и Content-Length не отправляются
BODYLESS_STATUSES = (204, 304)


def merge_response(prototype: Response, downstream: Response) -> Response:
    """
    Накладывает ответ приложения на ответ, пришедший по цепочке.

    Статус и тело берутся от приложения, заголовки прототипа сохраняются,
    если приложение не выставило заголовок с тем же именем.
    """
    names = {name for name, _ in downstream.headers.raw}
    raw = [(name, value) for name, value in prototype.headers.raw if name not in names]
    raw.extend(downstream.headers.raw)
    return Response(
        status_code=downstream.status_code,
        headers=Headers(raw=raw),
        body=downstream.body,
    )


class DownstreamStage:
    """Звено цепочки, вызывающее нижележащее ASGI приложение."""

    def __init__(self, call_next: CallNext, request: StarletteRequest):
        self.call_next = call_next
        self.request = request

    async def fetch(self) -> Response:
        response = await self.call_next(self.request)

        body = b""
        async for chunk in response.body_iterator:
            body += chunk

        return Response.build(response.status_code, response.headers, body)

    def invoke(self, request: Request, response: Response, next: Handler) -> Response:
        downstream = anyio.from_thread.run(self.fetch)
        return next(request, merge_response(response, downstream))


def to_starlette_response(response: Response) -> StarletteResponse:
    body = response.read_body()
    result = StarletteResponse(content=body, status_code=response.status_code)

    raw = [(name, value) for name, value in response.headers.raw if name != b"content-length"]
    if response.status_code >= 200 and response.status_code not in BODYLESS_STATUSES:
        raw.append((b"content-length", str(len(body)).encode("latin-1")))
    result.raw_headers = raw
    return result


class ChainMiddleware(BaseHTTPMiddleware):
    """
    Выполняет `before` звенья, затем приложение, затем `after` звенья.

    Звено из `before` может вернуть ответ сам (например, редирект на HTTPS),
    тогда приложение не вызывается.
    """

    def __init__(
        self,
        app,
        before: Sequence[Middleware] = (),
        after: Sequence[Middleware] = (),
    ):
        super().__init__(app)
        self.before: List[Middleware] = list(before)
        self.after: List[Middleware] = list(after)

    async def dispatch(self, request: StarletteRequest, call_next: CallNext) -> StarletteResponse:
        pipeline = Pipeline([*self.before, DownstreamStage(call_next, request), *self.after])
        core_request = Request.build(request.url, request.method, request.headers)

        try:
            result = await run_in_threadpool(pipeline.handle, core_request, Response())
        except Exception as e:
            logger.error(
                f"Middleware chain failed for {request.method} {request.url.path}: "
                f"{type(e).__name__}: {e}"
            )
            raise

        return to_starlette_response(result)


def build_chain_middleware_kwargs(settings: Settings, adapter: MinifierAdapter) -> Dict[str, Any]:
    """
    Собирает стандартную цепочку из настроек.

    HTTPS проверяется до приложения, минификация - после.
    """
    configure_level(settings.LOG_LEVEL)

    before: List[Middleware] = []
    after: List[Middleware] = []

    if settings.HTTPS_ENABLED:
        before.append(HttpsMiddleware(HttpsConfigBuilder.from_settings(settings).build()))

    if settings.MINIFY_ENABLED:
        after.append(MinifyMiddleware(adapter, MinifyConfigBuilder.from_settings(settings).build()))

    logger.info(
        f"{settings.APP_NAME} chain configured: "
        f"https={settings.HTTPS_ENABLED}, minify={settings.MINIFY_ENABLED}"
    )
    return {"before": before, "after": after}


__all__ = [
    "ChainMiddleware",
    "DownstreamStage",
    "build_chain_middleware_kwargs",
    "merge_response",
    "to_starlette_response",
]
