"""
Контракт вызова цепочки middleware.

Каждое звено вызывается как `invoke(request, response, next)` и либо
возвращает ответ сразу (short-circuit), либо вызывает `next` с новым
ответом и возвращает его результат.

Использование:
    from webchain.middleware.chain import Pipeline

    pipeline = Pipeline([https_middleware, minify_middleware])
    response = pipeline.handle(request, Response())
"""

from typing import Callable, List, Optional, Protocol, Sequence

from webchain.http.messages import Request, Response

Handler = Callable[[Request, Response], Response]


class Middleware(Protocol):
    """Звено цепочки с единственным методом диспетчеризации."""

    def invoke(self, request: Request, response: Response, next: Handler) -> Response:
        ...


def identity_handler(request: Request, response: Response) -> Response:
    """Терминальный обработчик: возвращает ответ без изменений."""
    return response


class Pipeline:
    """
    Упорядоченный список звеньев, собранный в один обработчик.

    Порядок вызова совпадает с порядком `stages`. Сам `Pipeline` тоже
    реализует `invoke`, поэтому цепочки можно вкладывать друг в друга.
    """

    def __init__(
        self,
        stages: Sequence[Middleware] = (),
        terminal: Optional[Handler] = None,
    ):
        self.stages: List[Middleware] = list(stages)
        self.terminal: Handler = terminal or identity_handler

    def handle(self, request: Request, response: Response) -> Response:
        return self._dispatch(0, self.terminal)(request, response)

    def invoke(self, request: Request, response: Response, next: Handler) -> Response:
        return self._dispatch(0, next)(request, response)

    __call__ = invoke

    def _dispatch(self, index: int, terminal: Handler) -> Handler:
        if index >= len(self.stages):
            return terminal

        stage = self.stages[index]

        def handler(request: Request, response: Response) -> Response:
            return stage.invoke(request, response, self._dispatch(index + 1, terminal))

        return handler


__all__ = ["Handler", "Middleware", "Pipeline", "identity_handler"]
