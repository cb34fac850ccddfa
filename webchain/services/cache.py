"""
Предикат кэшируемости пары запрос/ответ для shared cache.

Хранилище кэша здесь не реализуется - только решение, можно ли
переиспользовать ответ. Предикат общий для любых cache-aware middleware.
"""

from typing import FrozenSet, Iterable, Optional

from webchain.http.messages import Request, Response

CACHEABLE_METHODS: FrozenSet[str] = frozenset({"GET", "HEAD"})

# Коды, кэшируемые по умолчанию (RFC 9110, Section 15.1)
DEFAULT_CACHEABLE_STATUSES: FrozenSet[int] = frozenset(
    {200, 203, 204, 206, 300, 301, 302, 404, 405, 410, 414, 501}
)

# Директивы, запрещающие хранение в shared cache
FORBIDDEN_DIRECTIVES: FrozenSet[str] = frozenset({"no-store", "private"})


def parse_cache_control(values: Iterable[str]) -> FrozenSet[str]:
    """
    Возвращает имена директив Cache-Control в нижнем регистре.

    `private="Set-Cookie"` даёт `private`, аргументы отбрасываются.
    """
    directives = set()
    for value in values:
        for part in value.split(","):
            name = part.split("=", 1)[0].strip().lower()
            if name:
                directives.add(name)
    return frozenset(directives)


class CacheabilityGate:
    """Проверяет метод, код ответа и директивы Cache-Control."""

    def __init__(self, statuses: Optional[Iterable[int]] = None):
        self.statuses = frozenset(statuses) if statuses is not None else DEFAULT_CACHEABLE_STATUSES

    def is_cacheable(self, request: Request, response: Response) -> bool:
        if request.method.upper() not in CACHEABLE_METHODS:
            return False

        if response.status_code not in self.statuses:
            return False

        directives = parse_cache_control(response.headers.getlist("cache-control"))
        return not (directives & FORBIDDEN_DIRECTIVES)

    __call__ = is_cacheable


default_gate = CacheabilityGate()


def is_cacheable(request: Request, response: Response) -> bool:
    return default_gate.is_cacheable(request, response)


__all__ = [
    "CACHEABLE_METHODS",
    "DEFAULT_CACHEABLE_STATUSES",
    "CacheabilityGate",
    "default_gate",
    "is_cacheable",
    "parse_cache_control",
]
