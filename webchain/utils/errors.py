"""Исключения конфигурации цепочки middleware."""

from typing import Optional


class WebchainError(Exception):
    """Базовое исключение для всех ошибок webchain."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        self.message = message
        self.original_exception = original_exception
        super().__init__(message)


class ConfigurationError(WebchainError, ValueError):
    """Ошибка конфигурации - неверные параметры настройки middleware."""


class InvalidRedirectStatusError(ConfigurationError):
    """Код редиректа не входит в допустимый набор 3xx кодов."""

    def __init__(self, status_code: int, allowed: tuple):
        self.status_code = status_code
        self.allowed = allowed
        super().__init__(
            f"Invalid redirect status {status_code!r}, expected one of: "
            f"{', '.join(str(code) for code in allowed)}"
        )


__all__ = [
    "WebchainError",
    "ConfigurationError",
    "InvalidRedirectStatusError",
]
