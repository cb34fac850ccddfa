import os
import re
import sys

import pytest

# Добавить корень проекта в PYTHONPATH для корректного импорта webchain.*
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from webchain.http.messages import Request, Response  # noqa: E402
from webchain.services.minifier import HtmlOptions  # noqa: E402


class FakeMinifier:
    """
    Детерминированный минификатор для тестов.

    CSS/JS: удаляет все пробельные символы. HTML: схлопывает пробелы.
    Все вызовы записываются в `calls`.
    """

    def __init__(self):
        self.calls = []

    def minify_css(self, body: bytes) -> bytes:
        self.calls.append(("css", body))
        return re.sub(rb"\s+", b"", body)

    def minify_js(self, body: bytes) -> bytes:
        self.calls.append(("js", body))
        return re.sub(rb"\s+", b"", body)

    def minify_html(self, body: bytes, options: HtmlOptions) -> bytes:
        self.calls.append(("html", body, options))
        return re.sub(rb"\s+", b" ", body).strip()

    def kinds(self):
        return [call[0] for call in self.calls]


class RecordingNext:
    """`next` обработчик, запоминающий, с чем его вызвали."""

    def __init__(self):
        self.calls = []

    def __call__(self, request: Request, response: Response) -> Response:
        self.calls.append((request, response))
        return response

    @property
    def called(self) -> bool:
        return bool(self.calls)

    @property
    def response(self) -> Response:
        return self.calls[-1][1]


@pytest.fixture
def fake_minifier():
    return FakeMinifier()


@pytest.fixture
def recording_next():
    return RecordingNext()
