"""
Неизменяемые значения запроса и ответа для цепочки middleware.

Заголовки и URL переиспользуют структуры данных Starlette
(`Headers` - регистронезависимый мульти-словарь, `URL` - разобранный URI).
Каждое изменение ответа создаёт новое значение (copy-on-write),
поэтому middleware никогда не меняет объект, на который ссылается кто-то ещё.

Использование:
    from webchain.http.messages import Request, Response

    request = Request.build("http://example.com/a")
    response = Response.build(200, {"Content-Type": "text/css"}, b"a { }")
    response = response.with_header("X-Frame-Options", "DENY")
"""

import io
from dataclasses import dataclass, field, replace
from typing import BinaryIO, Callable, Iterable, Mapping, Optional, Tuple, Union

from starlette.datastructures import URL, Headers

Body = Union[bytes, BinaryIO]
BodyFactory = Callable[[], BinaryIO]
HeadersInit = Union[Headers, Mapping[str, str], Iterable[Tuple[str, str]], None]


def default_body_factory() -> BinaryIO:
    """Фабрика тела ответа по умолчанию - пустой буфер в памяти."""
    return io.BytesIO()


def make_headers(headers: HeadersInit = None) -> Headers:
    """
    Собирает неизменяемые `Headers` из словаря, списка пар или других `Headers`.

    Список пар сохраняет повторяющиеся заголовки (например, несколько Cache-Control).
    """
    if headers is None:
        return Headers()
    if isinstance(headers, Headers):
        return Headers(raw=list(headers.raw))
    if isinstance(headers, Mapping):
        return Headers(headers=dict(headers))
    return Headers(
        raw=[
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in headers
        ]
    )


def _header_line(headers: Headers, name: str) -> str:
    return ", ".join(headers.getlist(name))


@dataclass(frozen=True)
class Request:
    """Входящий запрос. Middleware только читают его."""

    url: URL
    method: str = "GET"
    headers: Headers = field(default_factory=Headers)

    @classmethod
    def build(
        cls,
        url: Union[str, URL],
        method: str = "GET",
        headers: HeadersInit = None,
    ) -> "Request":
        return cls(
            url=url if isinstance(url, URL) else URL(url),
            method=method.upper(),
            headers=make_headers(headers),
        )

    @property
    def scheme(self) -> str:
        return self.url.scheme

    @property
    def path(self) -> str:
        return self.url.path

    def get_header_line(self, name: str) -> str:
        return _header_line(self.headers, name)


@dataclass(frozen=True)
class Response:
    """
    Ответ, передаваемый по цепочке.

    `body` - байты или читаемый бинарный поток. Методы `with_*` возвращают
    новый ответ, исходный остаётся без изменений.
    """

    status_code: int = 200
    headers: Headers = field(default_factory=Headers)
    body: Body = b""

    @classmethod
    def build(
        cls,
        status_code: int = 200,
        headers: HeadersInit = None,
        body: Body = b"",
    ) -> "Response":
        return cls(status_code=status_code, headers=make_headers(headers), body=body)

    def get_header_line(self, name: str) -> str:
        return _header_line(self.headers, name)

    def has_header(self, name: str) -> bool:
        return name in self.headers

    def with_status(self, status_code: int) -> "Response":
        return replace(self, status_code=status_code)

    def with_header(self, name: str, value: str) -> "Response":
        """Заменяет все значения заголовка `name` одним значением."""
        mutable = self.headers.mutablecopy()
        mutable[name] = value
        return replace(self, headers=Headers(raw=list(mutable.raw)))

    def without_header(self, name: str) -> "Response":
        if name not in self.headers:
            return self
        mutable = self.headers.mutablecopy()
        del mutable[name]
        return replace(self, headers=Headers(raw=list(mutable.raw)))

    def with_body(self, body: Body) -> "Response":
        return replace(self, body=body)

    def read_body(self) -> bytes:
        """Возвращает тело целиком в виде байтов."""
        body = self.body
        if isinstance(body, (bytes, bytearray, memoryview)):
            return bytes(body)
        getvalue: Optional[Callable[[], bytes]] = getattr(body, "getvalue", None)
        if getvalue is not None:
            return getvalue()
        if body.seekable():
            body.seek(0)
        return body.read()


__all__ = [
    "Body",
    "BodyFactory",
    "Request",
    "Response",
    "default_body_factory",
    "make_headers",
]
